"""
Media Storage Factory

Uses the local filesystem under MEDIA_ROOT.
"""
from vidtube.config import settings

from .storage_base import MediaStorage
from .storage_local import LocalMediaStorage

local_media_storage = LocalMediaStorage(settings.media_root, settings.media_base_url)


def get_media_storage() -> MediaStorage:
    """
    Get media storage

    Also used as a FastAPI dependency, so tests can override it.
    """
    return local_media_storage
