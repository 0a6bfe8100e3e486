"""
Media Storage Abstract Interface

Provides a unified interface for where avatar / cover images end up
(local disk, object storage, ...). Callers only get back a public URL.
"""
from abc import ABC, abstractmethod


class MediaStorage(ABC):
    """Media Storage Abstract Base Class"""

    @abstractmethod
    async def upload(self, filename: str, data: bytes) -> str:
        """
        Store a file

        Parameters:
        - filename: Original client filename (only the extension is kept)
        - data: Raw file content

        Returns:
        - str: Public URL of the stored file
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Storage name (e.g., "Local filesystem")"""
        pass
