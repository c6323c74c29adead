import logging
LOGGER = logging.getLogger(__name__)

from dotenv import load_dotenv
from dataclasses import dataclass
from assistable.node.cache import node_cache
import os

load_dotenv()


DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class PollPolicy:
    interval: float = 0.5
    max_interval: float = 5.0
    backoff: float = 1.5
    timeout: float = 600.0
    max_idle_actions: int = 10

    def next_interval(self, current: float) -> float:
        return min(current * self.backoff, self.max_interval)


class Config:

    def __init__(self):
        LOGGER.info("Created Config instance")

    @classmethod
    @node_cache
    def config(cls):
        return Config()

    def get_metadata_db_url(self):
        return os.getenv('METADATA_DB_URL', 'sqlite:////tmp/.assistable-metadata.db')

    def get_openai_base_url(self):
        return os.getenv('OPENAI_BASE_URL', DEFAULT_OPENAI_BASE_URL).rstrip('/')

    def get_user_home(self):
        return os.getenv('ASSISTABLE_HOME', os.path.expanduser('~'))

    def get_image_cache_dir(self):
        """Per-user directory where images produced by assistants are cached."""
        return os.path.join(self.get_user_home(), '.assistable', 'openai-assistant')

    def get_credential_secret(self):
        return os.getenv('CREDENTIAL_SECRET_KEY')

    def get_poll_policy(self) -> PollPolicy:
        policy = PollPolicy(
            interval=float(os.getenv('ASSISTANT_POLL_INTERVAL', 0.5)),
            max_interval=float(os.getenv('ASSISTANT_POLL_MAX_INTERVAL', 5.0)),
            backoff=float(os.getenv('ASSISTANT_POLL_BACKOFF', 1.5)),
            timeout=float(os.getenv('ASSISTANT_RUN_TIMEOUT', 600)),
            max_idle_actions=int(os.getenv('ASSISTANT_MAX_IDLE_ACTIONS', 10)),
        )
        LOGGER.debug(f"Using poll policy: {policy}")
        return policy

    def get_cors_origins(self):
        cors_origins_str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost,http://localhost:3000")
        return [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
