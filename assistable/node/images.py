import requests
import logging
import base64
import html
import os
from typing import Dict, Optional

LOGGER = logging.getLogger(__name__)


DOWNLOAD_TIMEOUT = 60
CHUNK_SIZE = 64 * 1024


class ImageRenderer:
    """
    Downloads images referenced by assistant messages into a local cache
    directory and renders them as inline <img> tags with base64 data URIs.
    Each remote file is downloaded at most once per renderer.
    """

    def __init__(self, openai_client, api_key: str, cache_dir: str, base_url: str):
        self.openai_client = openai_client
        self.api_key = api_key
        self.cache_dir = cache_dir
        self.base_url = base_url
        self.rendered: Dict[str, Optional[str]] = {}

    def get_file_path(self, filename: str) -> str:
        return os.path.join(self.cache_dir, f"{os.path.basename(filename)}.png")

    def download(self, file_id: str, file_path: str) -> bool:
        try:
            response = requests.get(
                f"{self.base_url}/files/{file_id}/content",
                headers={"Accept": "*/*", "Authorization": f"Bearer {self.api_key}"},
                stream=True,
                timeout=DOWNLOAD_TIMEOUT,
            )
            response.raise_for_status()
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(file_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
            LOGGER.info(f"File downloaded and written to {file_path}")
            return True
        except (requests.RequestException, OSError) as e:
            LOGGER.error(f"Error downloading or writing the file {file_id}: {e}")
            return False

    def render(self, file_id: str) -> Optional[str]:
        if file_id in self.rendered:
            return self.rendered[file_id]

        file_obj = self.openai_client.files.retrieve(file_id)
        file_path = self.get_file_path(file_obj.filename)
        img_html = None
        if self.download(file_obj.id, file_path):
            with open(file_path, "rb") as f:
                base64_string = base64.b64encode(f.read()).decode("utf-8")
            img_html = (f'<img src="data:image/png;base64,{base64_string}" width="100%" '
                        f'height="max-content" alt="{html.escape(file_obj.filename, quote=True)}" /><br/>')
        self.rendered[file_id] = img_html
        return img_html
