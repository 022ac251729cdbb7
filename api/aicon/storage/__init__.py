"""Content store drivers for source images and generated favicons."""

from aicon.storage.base import BaseStorageDriver
from aicon.storage.factory import get_storage_driver

__all__ = ["BaseStorageDriver", "get_storage_driver"]
