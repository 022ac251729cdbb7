"""Favicon schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceType:
    """Provenance of the source bytes."""

    UPLOAD = "UPLOAD"
    CANVAS = "CANVAS"

    ALL = (UPLOAD, CANVAS)


class GenerationStatus:
    """Favicon generation status values."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    TERMINAL = (SUCCESS, FAILED)


class AssetType:
    """Generated asset types. SVG is reserved and never generated."""

    PNG = "PNG"
    ICO = "ICO"
    SVG = "SVG"


class DedupPolicy:
    """What create does when the content fingerprint is already known."""

    ALWAYS_CREATE = "always_create"
    REUSE_EXISTING = "reuse_existing"


MULTI_DIMENSION = "MULTI"


class FaviconCreated(BaseModel):
    """Identifiers returned by a create call."""

    id: str
    slug: str


class CanvasCreateRequest(BaseModel):
    """Request body for canvas-drawn favicons."""

    data_url: str = Field(..., alias="dataUrl", description="Base64 image data URL")
    title: Optional[str] = None
    target_domain: Optional[str] = Field(None, alias="targetDomain")
    metadata: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class FaviconAssetResponse(BaseModel):
    """Generated asset entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    size: Optional[str]
    format: str
    mime_type: str
    storage_key: str
    url: str


class FaviconDetailResponse(BaseModel):
    """Favicon with its generation status and assets."""

    id: str
    slug: str
    title: Optional[str] = None
    target_domain: Optional[str] = None
    published_url: str
    source_url: str
    source_type: str
    is_published: bool
    created_at: datetime
    generated_at: Optional[datetime] = None
    generation_status: str
    generation_error: Optional[str] = None
    metadata: Optional[str] = None
    has_steganography: bool = False
    assets: List[FaviconAssetResponse] = Field(default_factory=list)


class DirectoryItem(BaseModel):
    """Published favicon as listed in the directory."""

    id: str
    slug: str
    target_domain: Optional[str] = None
    published_url: str
    source_url: str
    created_at: datetime
    asset_count: int


class DirectoryResponse(BaseModel):
    """Paginated directory listing."""

    items: List[DirectoryItem] = Field(..., description="Favicons in this page")
    total: int = Field(..., description="Total published favicons")
    page: int = Field(..., description="Current page")
    page_size: int = Field(..., description="Page size")
