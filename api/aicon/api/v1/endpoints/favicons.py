"""Favicon endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from aicon.api.deps import get_favicon_service
from aicon.exceptions import NotFoundError, PersistenceError, StorageError, ValidationError
from aicon.models.favicon import Favicon
from aicon.models.favicon_asset import FaviconAsset
from aicon.schemas.favicon import (
    CanvasCreateRequest,
    FaviconAssetResponse,
    FaviconDetailResponse,
    SourceType,
)
from aicon.services.favicon_service import FaviconService
from aicon.services.validation import (
    decode_data_url,
    validate_create_fields,
    validate_file_size,
    validate_image_type,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def source_url(favicon_id: str) -> str:
    return f"/api/storage/sources/{favicon_id}/original"


def asset_url(storage_key: str) -> str:
    return f"/api/storage/{storage_key}"


def build_detail(favicon: Favicon, assets: List[FaviconAsset]) -> FaviconDetailResponse:
    """Build the public representation of a favicon."""
    return FaviconDetailResponse(
        id=favicon.id,
        slug=favicon.slug,
        title=favicon.title,
        target_domain=favicon.target_domain,
        published_url=favicon.published_url,
        source_url=source_url(favicon.id),
        source_type=favicon.source_type,
        is_published=favicon.is_published,
        created_at=favicon.created_at,
        generated_at=favicon.generated_at,
        generation_status=favicon.generation_status,
        generation_error=favicon.generation_error,
        metadata=favicon.embedded_metadata,
        has_steganography=favicon.has_steganography,
        assets=[
            FaviconAssetResponse(
                id=asset.id,
                type=asset.type,
                size=asset.size,
                format=asset.format,
                mime_type=asset.mime_type,
                storage_key=asset.storage_key,
                url=asset_url(asset.storage_key),
            )
            for asset in assets
        ],
    )


async def _create_and_describe(
    service: FaviconService,
    content: bytes,
    content_type: str,
    source_type: str,
    title: Optional[str],
    target_domain: Optional[str],
    metadata: Optional[str],
) -> FaviconDetailResponse:
    try:
        created = await service.create_favicon(
            source=content,
            content_type=content_type,
            source_type=source_type,
            title=title,
            target_domain=target_domain,
            embedded_metadata=metadata,
        )
        favicon, assets = service.get_favicon_detail(created.slug)
    except StorageError as e:
        logger.error(f"Failed to store source image: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to store source image: {str(e)}",
        )
    except PersistenceError as e:
        logger.error(f"Failed to create favicon: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to create favicon",
        )

    return build_detail(favicon, assets)


@router.post("/upload", response_model=FaviconDetailResponse, status_code=status.HTTP_201_CREATED)
async def upload_favicon(
    file: UploadFile = File(..., description="Source image"),
    title: Optional[str] = Form(None),
    target_domain: Optional[str] = Form(None, alias="targetDomain"),
    metadata: Optional[str] = Form(None),
    service: FaviconService = Depends(get_favicon_service),
):
    """Upload an image and generate a favicon with a unique URL.

    - **file**: Source image (PNG, JPEG, GIF or SVG, max 0.5 MB)
    - **targetDomain**: Optional domain used in generated asset filenames
    - **metadata**: Optional text (max 256 chars) embedded into PNG assets

    Generation continues in the background; poll the returned slug for status.
    """
    content = await file.read()
    content_type = file.content_type or ""

    try:
        validate_file_size(len(content), service.settings.max_upload_bytes)
        if not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed")
        validate_image_type(content)
        validate_create_fields(
            target_domain,
            metadata,
            service.settings.max_domain_length,
            service.settings.max_metadata_length,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return await _create_and_describe(
        service, content, content_type, SourceType.UPLOAD, title, target_domain, metadata
    )


@router.post("/canvas", response_model=FaviconDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_from_canvas(
    request: CanvasCreateRequest,
    service: FaviconService = Depends(get_favicon_service),
):
    """Submit a canvas-drawn icon as a base64 data URL."""
    try:
        content = decode_data_url(request.data_url)
        validate_file_size(len(content), service.settings.max_upload_bytes)
        content_type = validate_image_type(content)
        validate_create_fields(
            request.target_domain,
            request.metadata,
            service.settings.max_domain_length,
            service.settings.max_metadata_length,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return await _create_and_describe(
        service,
        content,
        content_type,
        SourceType.CANVAS,
        request.title,
        request.target_domain,
        request.metadata,
    )


@router.get("/{slug}", response_model=FaviconDetailResponse)
def get_favicon(slug: str, service: FaviconService = Depends(get_favicon_service)):
    """Get favicon metadata, generation status and assets."""
    try:
        favicon, assets = service.get_favicon_detail(slug)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favicon not found")

    return build_detail(favicon, assets)
