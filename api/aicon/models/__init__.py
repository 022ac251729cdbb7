"""SQLAlchemy models."""

from aicon.database import Base
from aicon.models.favicon import Favicon
from aicon.models.favicon_asset import FaviconAsset

__all__ = [
    "Base",
    "Favicon",
    "FaviconAsset",
]
