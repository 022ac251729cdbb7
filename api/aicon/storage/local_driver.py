"""Local filesystem storage driver."""

import os
from pathlib import Path
from typing import Any, Dict

import aiofiles
import aiofiles.os

from aicon.exceptions import NotFoundError
from aicon.storage.base import BaseStorageDriver, StorageError


class LocalStorageDriver(BaseStorageDriver):
    """Local filesystem storage driver.

    Configuration:
        base_path: Path to storage directory (created if missing)

    Example:
        >>> driver = LocalStorageDriver({"base_path": "/data/storage"})
        >>> await driver.put_object("sources/abc/original", b"...", "image/png")
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.base_path = Path(config["base_path"]).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _validate_path(self, key: str) -> Path:
        """Validate key resolves within base_path (prevent directory traversal).

        Raises:
            StorageError: If key tries to escape base_path
        """
        full_path = (self.base_path / key).resolve()

        try:
            full_path.relative_to(self.base_path)
        except ValueError:
            raise StorageError(f"Key {key} attempts to escape base directory")

        if full_path == self.base_path:
            raise StorageError("Empty storage key")

        return full_path

    async def put_object(self, key: str, content: bytes, content_type: str) -> str:
        full_path = self._validate_path(key)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to write object {key}: {e}")

        return key

    async def get_object(self, key: str) -> bytes:
        full_path = self._validate_path(key)

        if not full_path.is_file():
            raise NotFoundError("Object", key)

        try:
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"Failed to read object {key}: {e}")

    async def delete_object(self, key: str) -> None:
        full_path = self._validate_path(key)

        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to delete object {key}: {e}")

    async def test_connection(self) -> bool:
        """Test if base path exists and is writable."""
        try:
            return self.base_path.exists() and os.access(self.base_path, os.W_OK)
        except OSError:
            return False
