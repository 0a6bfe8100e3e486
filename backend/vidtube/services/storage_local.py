"""
Local filesystem media storage.

Writes uploads under MEDIA_ROOT with a random name and returns a URL under
MEDIA_BASE_URL (served by the static mount in main.py).
"""
import logging
import uuid
from pathlib import Path

from .storage_base import MediaStorage

logger = logging.getLogger("uvicorn.error")


class LocalMediaStorage(MediaStorage):
    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "Local filesystem"

    async def upload(self, filename: str, data: bytes) -> str:
        suffix = Path(filename or "").suffix.lower()[:10]
        stored_name = f"{uuid.uuid4().hex}{suffix}"

        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / stored_name).write_bytes(data)
        logger.info("[storage] stored %d bytes as %s", len(data), stored_name)
        return f"{self.base_url}/{stored_name}"
