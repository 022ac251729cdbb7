"""Favicon and asset record persistence."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aicon.exceptions import InvalidStatusTransitionError, NotFoundError, PersistenceError
from aicon.models.favicon import Favicon
from aicon.models.favicon_asset import FaviconAsset
from aicon.schemas.favicon import GenerationStatus

logger = logging.getLogger(__name__)

# PENDING is the only state with outgoing transitions
ALLOWED_TRANSITIONS = {
    GenerationStatus.PENDING: set(GenerationStatus.TERMINAL),
}

DIRECTORY_SORT_COLUMNS = {
    "date": Favicon.created_at,
    "url": Favicon.published_url,
    "domain": Favicon.target_domain,
}


def _commit(db: Session, operation: str) -> None:
    """Commit, rolling back and wrapping driver errors."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"DB {operation} failed: {e}")
        raise PersistenceError(str(e), operation)


def insert_favicon(db: Session, favicon: Favicon) -> Favicon:
    """Insert a new favicon record.

    Raises:
        PersistenceError: If the insert fails (e.g. duplicate slug)
    """
    db.add(favicon)
    _commit(db, "insert favicon")
    db.refresh(favicon)
    return favicon


def get_favicon_by_id(db: Session, favicon_id: str) -> Optional[Favicon]:
    """Get favicon by ID, or None."""
    return db.query(Favicon).filter(Favicon.id == favicon_id).first()


def get_favicon_by_slug(db: Session, slug: str) -> Optional[Favicon]:
    """Get favicon by slug, or None."""
    return db.query(Favicon).filter(Favicon.slug == slug).first()


def slug_exists(db: Session, slug: str) -> bool:
    return db.query(Favicon.id).filter(Favicon.slug == slug).first() is not None


def find_favicon_by_fingerprint(db: Session, source_hash: str, source_size: int) -> Optional[Favicon]:
    """Find the most recently created favicon with this content fingerprint.

    Args:
        db: Database session
        source_hash: Hex digest of the source bytes
        source_size: Length of the source bytes

    Returns:
        Matching Favicon (in any status) or None

    Examples:
        >>> existing = find_favicon_by_fingerprint(db, "9e107d9d372bb6826bd81d3542a419d6", 1024)
        >>> existing.slug
        'V1StGXR8_Z'
    """
    return (
        db.query(Favicon)
        .filter(
            Favicon.source_hash == source_hash,
            Favicon.source_size == source_size,
        )
        .order_by(Favicon.created_at.desc())
        .first()
    )


def update_favicon_status(
    db: Session,
    favicon_id: str,
    status: str,
    error: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Favicon:
    """Move a favicon to a new generation status.

    Raises:
        NotFoundError: If the favicon does not exist
        InvalidStatusTransitionError: If the current status is terminal
        PersistenceError: If the update fails
    """
    favicon = get_favicon_by_id(db, favicon_id)
    if not favicon:
        raise NotFoundError("Favicon", favicon_id)

    current = favicon.generation_status
    if status not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransitionError(favicon_id, current, status)

    favicon.generation_status = status
    favicon.generation_error = error if status == GenerationStatus.FAILED else None
    favicon.generated_at = generated_at
    favicon.updated_at = datetime.utcnow()
    _commit(db, "update status")
    db.refresh(favicon)
    return favicon


def insert_favicon_asset(db: Session, asset: FaviconAsset) -> FaviconAsset:
    """Insert a generated asset record.

    Raises:
        PersistenceError: If the insert fails (e.g. unknown favicon)
    """
    db.add(asset)
    _commit(db, "insert asset")
    return asset


def list_assets_by_favicon(db: Session, favicon_id: str) -> List[FaviconAsset]:
    """List the assets of a favicon in insertion order."""
    return (
        db.query(FaviconAsset)
        .filter(FaviconAsset.favicon_id == favicon_id)
        .order_by(FaviconAsset.created_at, FaviconAsset.storage_key)
        .all()
    )


def delete_favicon_cascade(db: Session, favicon_id: str) -> bool:
    """Delete a favicon and all of its asset rows in one transaction.

    Returns:
        True if deleted, False if not found

    Raises:
        PersistenceError: If the deletion fails (nothing is removed)
    """
    favicon = get_favicon_by_id(db, favicon_id)
    if not favicon:
        return False

    try:
        db.query(FaviconAsset).filter(FaviconAsset.favicon_id == favicon_id).delete(
            synchronize_session=False
        )
        db.delete(favicon)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e), "delete favicon")

    _commit(db, "delete favicon")
    return True


def list_published_favicons(
    db: Session,
    page: int = 1,
    page_size: int = 100,
    sort_by: str = "domain",
    sort_dir: str = "asc",
) -> Tuple[List[Tuple[Favicon, int]], int]:
    """List published favicons with their asset counts.

    Args:
        db: Database session
        page: Page number (1-indexed)
        page_size: Page size
        sort_by: date, url or domain
        sort_dir: asc or desc

    Returns:
        Tuple of ([(favicon, asset_count), ...], total_count)
    """
    base_query = db.query(Favicon).filter(Favicon.is_published.is_(True))
    total = base_query.count()

    column = DIRECTORY_SORT_COLUMNS.get(sort_by, Favicon.created_at)
    order = column.asc() if sort_dir == "asc" else column.desc()

    asset_counts = (
        db.query(FaviconAsset.favicon_id, func.count(FaviconAsset.id).label("asset_count"))
        .group_by(FaviconAsset.favicon_id)
        .subquery()
    )

    rows = (
        db.query(Favicon, func.coalesce(asset_counts.c.asset_count, 0))
        .outerjoin(asset_counts, asset_counts.c.favicon_id == Favicon.id)
        .filter(Favicon.is_published.is_(True))
        .order_by(order, Favicon.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return [(favicon, int(count)) for favicon, count in rows], total
