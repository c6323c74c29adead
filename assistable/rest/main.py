import logging.config
import yaml
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from assistable.node.config import Config
from assistable.rest.routers import assistants

# Configure logging from YAML file
def setup_logging():
    """Load logging configuration from YAML file"""

    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    logs_dir = os.path.join(project_root, "logs")

    if not os.path.exists(logs_dir):
        os.makedirs(logs_dir)

    config_path = os.path.join(os.path.dirname(__file__), "logging_config.yaml")
    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
            if 'file' in config.get('handlers', {}):
                config['handlers']['file']['filename'] = os.path.join(logs_dir, "assistable.log")
            logging.config.dictConfig(config)
    else:
        # Fallback to basic configuration if file not found
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
        )
        logging.warning(f"Logging configuration file not found at {config_path}, using default configuration")

setup_logging()
LOGGER = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Assistable REST API",
    description="REST API for running stored OpenAI Assistants",
    version="1.0.0"
)

origins = Config.config().get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

LOGGER.info(f"CORSMiddleware added with origins: {origins}")

app.include_router(assistants.router)

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def run():
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 8000)))


__all__ = ["app", "run"]
