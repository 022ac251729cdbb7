"""Stored object endpoints (source images and generated assets)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from aicon.api.deps import get_favicon_service
from aicon.exceptions import NotFoundError, StorageError
from aicon.services.favicon_service import FaviconService

router = APIRouter()
logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.get("/sources/{favicon_id}/original")
async def get_source(favicon_id: str, service: FaviconService = Depends(get_favicon_service)):
    """Serve the original source image; content type is sniffed from magic bytes."""
    try:
        content, mime_type = await service.read_source(favicon_id)
    except (NotFoundError, StorageError) as e:
        logger.debug(f"Source for {favicon_id} unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return Response(content=content, media_type=mime_type, headers={"Cache-Control": CACHE_CONTROL})


@router.get("/{storage_key:path}")
async def get_asset(storage_key: str, service: FaviconService = Depends(get_favicon_service)):
    """Serve a stored asset; content type is inferred from the key's extension."""
    try:
        content, mime_type = await service.read_asset(storage_key)
    except (NotFoundError, StorageError) as e:
        logger.debug(f"Object {storage_key} unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    return Response(content=content, media_type=mime_type, headers={"Cache-Control": CACHE_CONTROL})
