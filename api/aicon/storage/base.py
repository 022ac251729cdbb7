"""Base storage driver interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from aicon.exceptions import StorageConnectionError, StorageError

__all__ = ["BaseStorageDriver", "StorageConnectionError", "StorageError"]


class BaseStorageDriver(ABC):
    """Base class for storage drivers.

    Keys are path-like strings such as ``sources/{id}/original`` or
    ``favicons/{slug}/32x32-example.com.png``. Drivers do not interpret
    the hierarchy; it is a caller convention.
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize storage driver with configuration.

        Args:
            config: Storage configuration dict with provider-specific settings
        """
        self.config = config

    @abstractmethod
    async def put_object(self, key: str, content: bytes, content_type: str) -> str:
        """Store bytes under key, replacing any previous object.

        Args:
            key: Object key
            content: Object content
            content_type: MIME type of the content

        Returns:
            The key that was written

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_object(self, key: str) -> bytes:
        """Read the bytes stored under key.

        Raises:
            NotFoundError: If no object exists for key
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """Delete the object stored under key.

        Deleting a missing key is not an error.

        Raises:
            StorageError: If the backend rejects the deletion
        """
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if storage is accessible.

        Returns:
            True if connection successful, False otherwise
        """
        pass
