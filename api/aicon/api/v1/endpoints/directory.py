"""Public directory of published favicons."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from aicon.api.deps import get_favicon_service
from aicon.api.v1.endpoints.favicons import source_url
from aicon.schemas.favicon import DirectoryItem, DirectoryResponse
from aicon.services.favicon_service import FaviconService

router = APIRouter()

# Client sort names to record store sort keys
SORT_BY_MAP = {
    "createdAt": "date",
    "slug": "url",
    "domain": "domain",
}


@router.get("", response_model=DirectoryResponse)
def list_directory(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=500, alias="pageSize"),
    sort_by: Optional[str] = Query("domain", alias="sortBy"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    service: FaviconService = Depends(get_favicon_service),
):
    """List published favicons with their asset counts."""
    rows, total = service.list_directory(
        page=page,
        page_size=page_size,
        sort_by=SORT_BY_MAP.get(sort_by or "domain", "domain"),
        sort_dir=order,
    )

    return DirectoryResponse(
        items=[
            DirectoryItem(
                id=favicon.id,
                slug=favicon.slug,
                target_domain=favicon.target_domain,
                published_url=favicon.published_url,
                source_url=source_url(favicon.id),
                created_at=favicon.created_at,
                asset_count=asset_count,
            )
            for favicon, asset_count in rows
        ],
        total=total,
        page=page,
        page_size=page_size,
    )
