"""Favicon creation pipeline: dedup, source storage, background generation, deletion."""

import asyncio
import hashlib
import logging
import secrets
import string
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from aicon.config import Settings
from aicon.exceptions import NotFoundError, PersistenceError, StorageError, ValidationError
from aicon.models.favicon import Favicon
from aicon.models.favicon_asset import FaviconAsset
from aicon.schemas.admin import DeletionResult
from aicon.schemas.favicon import (
    MULTI_DIMENSION,
    DedupPolicy,
    FaviconCreated,
    GenerationStatus,
    SourceType,
)
from aicon.services import record_store
from aicon.services.favicon_generator import FaviconGeneratorService
from aicon.storage.base import BaseStorageDriver
from aicon.storage.content_types import mime_type_from_key, sniff_image_mime
from aicon.tasks.spawner import TaskSpawner

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_letters + string.digits + "_-"
ID_LENGTH = 21
SLUG_LENGTH = 10
MAX_SLUG_ATTEMPTS = 5


def generate_id(length: int = ID_LENGTH) -> str:
    """Generate a random URL-safe identifier.

    Examples:
        >>> len(generate_id())
        21
        >>> len(generate_id(10))
        10
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def compute_fingerprint(content: bytes) -> Tuple[str, int]:
    """Content fingerprint used for duplicate detection: (md5 hex digest, length)."""
    return hashlib.md5(content).hexdigest(), len(content)


def normalize_embedded_metadata(metadata: Optional[str]) -> Optional[str]:
    """Trim metadata; blank or missing metadata becomes None."""
    if metadata is None:
        return None
    return metadata.strip() or None


def build_source_key(favicon_id: str) -> str:
    """Storage key of the original source image."""
    return f"sources/{favicon_id}/original"


def build_asset_key(slug: str, dimension: Optional[str], fmt: str, domain: str) -> str:
    """Storage key of a generated variant.

    The multi-resolution ICO uses the label ``favicon`` instead of a dimension.

    Examples:
        >>> build_asset_key("V1StGXR8_Z", "32x32", ".png", "example.com")
        'favicons/V1StGXR8_Z/32x32-example.com.png'
        >>> build_asset_key("V1StGXR8_Z", "MULTI", ".ico", "example.com")
        'favicons/V1StGXR8_Z/favicon-example.com.ico'
    """
    label = "favicon" if dimension in (None, MULTI_DIMENSION) else dimension
    return f"favicons/{slug}/{label}-{domain}{fmt}"


class FaviconService:
    """Orchestrates favicon creation, generation, lookup and deletion.

    The background generation task is the only writer of a record's status
    fields after creation.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        storage: BaseStorageDriver,
        generator: FaviconGeneratorService,
        spawner: TaskSpawner,
        settings: Settings,
    ):
        self.session_factory = session_factory
        self.storage = storage
        self.generator = generator
        self.spawner = spawner
        self.settings = settings

    async def create_favicon(
        self,
        source: bytes,
        content_type: str,
        source_type: str,
        title: Optional[str] = None,
        target_domain: Optional[str] = None,
        embedded_metadata: Optional[str] = None,
    ) -> FaviconCreated:
        """Store a source image, insert a PENDING record and start generation.

        Returns as soon as the record exists; generation continues in the
        background and ends in SUCCESS or FAILED.

        Args:
            source: Source image bytes (already validated by the caller)
            content_type: MIME type of source
            source_type: UPLOAD or CANVAS
            title: Optional label
            target_domain: Optional domain used in asset filenames
            embedded_metadata: Optional text embedded into PNG variants

        Returns:
            FaviconCreated with id and slug

        Raises:
            ValidationError: If source_type is not UPLOAD or CANVAS
            StorageError: If the source image cannot be stored
            PersistenceError: If the record cannot be inserted
        """
        if source_type not in SourceType.ALL:
            raise ValidationError(f"Unknown source type: {source_type}")

        source_hash, source_size = compute_fingerprint(source)
        metadata = normalize_embedded_metadata(embedded_metadata)
        target_domain = (target_domain or "").strip() or None

        with self.session_factory() as db:
            existing = record_store.find_favicon_by_fingerprint(db, source_hash, source_size)
            if existing:
                if self.settings.dedup_policy == DedupPolicy.REUSE_EXISTING:
                    logger.info(
                        f"Source matches favicon {existing.id} ({existing.generation_status}), reusing it"
                    )
                    return FaviconCreated(id=existing.id, slug=existing.slug)
                logger.info(f"Source matches favicon {existing.id}, creating a new record anyway")

            favicon_id = generate_id(ID_LENGTH)
            slug = self._allocate_slug(db)

        source_key = build_source_key(favicon_id)
        await self.storage.put_object(source_key, source, content_type)

        now = datetime.utcnow()
        favicon = Favicon(
            id=favicon_id,
            slug=slug,
            title=title or None,
            target_domain=target_domain,
            published_url=f"/f/{slug}",
            source_type=source_type,
            source_original_mime=content_type,
            source_hash=source_hash,
            source_size=source_size,
            is_published=True,
            generation_status=GenerationStatus.PENDING,
            generation_error=None,
            embedded_metadata=metadata,
            has_steganography=self.generator.USES_STEGANOGRAPHY,
            created_at=now,
            updated_at=now,
            generated_at=None,
        )

        with self.session_factory() as db:
            try:
                record_store.insert_favicon(db, favicon)
            except PersistenceError:
                await self._discard_object(source_key)
                raise

        logger.info(f"Created favicon {favicon_id} (slug={slug}, {source_size} bytes)")

        await self.spawner.spawn(
            lambda: self._generate_assets(favicon_id, slug, source, target_domain, metadata),
            lambda exc: self._mark_failed(favicon_id, exc),
        )

        return FaviconCreated(id=favicon_id, slug=slug)

    def _allocate_slug(self, db: Session) -> str:
        for _ in range(MAX_SLUG_ATTEMPTS):
            slug = generate_id(SLUG_LENGTH)
            if not record_store.slug_exists(db, slug):
                return slug
        raise PersistenceError("could not allocate a unique slug", "allocate slug")

    async def _generate_assets(
        self,
        favicon_id: str,
        slug: str,
        source: bytes,
        target_domain: Optional[str],
        metadata: Optional[str],
    ) -> None:
        """Generate, store and record every variant, then mark SUCCESS."""
        logger.info(f"Generating assets for favicon {favicon_id}")

        # Pillow work is CPU bound; keep it off the event loop
        variants = await asyncio.to_thread(self.generator.generate, source, metadata)
        domain = target_domain or self.settings.default_asset_domain

        for variant in variants:
            storage_key = build_asset_key(slug, variant.dimension, variant.format, domain)
            await self.storage.put_object(storage_key, variant.content, variant.mime_type)

            with self.session_factory() as db:
                record_store.insert_favicon_asset(
                    db,
                    FaviconAsset(
                        id=generate_id(ID_LENGTH),
                        favicon_id=favicon_id,
                        type=variant.asset_type,
                        size=variant.dimension,
                        format=variant.format,
                        storage_key=storage_key,
                        mime_type=variant.mime_type,
                        created_at=datetime.utcnow(),
                    ),
                )

        with self.session_factory() as db:
            record_store.update_favicon_status(
                db, favicon_id, GenerationStatus.SUCCESS, generated_at=datetime.utcnow()
            )

        logger.info(f"Generated {len(variants)} assets for favicon {favicon_id}")

    def _mark_failed(self, favicon_id: str, exc: Exception) -> None:
        """Failure callback for the generation task. Stored assets are kept."""
        message = str(exc) or exc.__class__.__name__
        logger.error(
            f"Failed to generate assets for favicon {favicon_id}: {message}",
            exc_info=exc,
        )
        with self.session_factory() as db:
            record_store.update_favicon_status(
                db, favicon_id, GenerationStatus.FAILED, error=message
            )

    def get_favicon(self, favicon_id: str) -> Favicon:
        """Get favicon by ID.

        Raises:
            NotFoundError: If favicon not found
        """
        with self.session_factory() as db:
            favicon = record_store.get_favicon_by_id(db, favicon_id)
        if not favicon:
            raise NotFoundError("Favicon", favicon_id)
        return favicon

    def get_favicon_detail(self, slug: str) -> Tuple[Favicon, List[FaviconAsset]]:
        """Get favicon and its assets by slug.

        Raises:
            NotFoundError: If favicon not found
        """
        with self.session_factory() as db:
            favicon = record_store.get_favicon_by_slug(db, slug)
            if not favicon:
                raise NotFoundError("Favicon", slug)
            assets = record_store.list_assets_by_favicon(db, favicon.id)
        return favicon, assets

    def list_directory(
        self,
        page: int = 1,
        page_size: int = 100,
        sort_by: str = "domain",
        sort_dir: str = "asc",
    ) -> Tuple[List[Tuple[Favicon, int]], int]:
        """List published favicons with asset counts."""
        with self.session_factory() as db:
            return record_store.list_published_favicons(db, page, page_size, sort_by, sort_dir)

    async def read_source(self, favicon_id: str) -> Tuple[bytes, str]:
        """Read an original source image and sniff its content type.

        Raises:
            NotFoundError: If the object is missing
        """
        content = await self.storage.get_object(build_source_key(favicon_id))
        return content, sniff_image_mime(content)

    async def read_asset(self, storage_key: str) -> Tuple[bytes, str]:
        """Read a stored variant; content type comes from the key's extension.

        Raises:
            NotFoundError: If the object is missing
        """
        content = await self.storage.get_object(storage_key)
        return content, mime_type_from_key(storage_key)

    async def delete_favicon(self, favicon_id: str) -> DeletionResult:
        """Delete a favicon's blobs and rows, tolerating blob failures.

        Blob deletions that fail are logged and skipped; the rows are still
        removed. Errors are reported in the result rather than raised.
        """
        try:
            with self.session_factory() as db:
                favicon = record_store.get_favicon_by_id(db, favicon_id)
                if not favicon:
                    return DeletionResult(id=favicon_id, success=False, error="Not found")
                asset_keys = [
                    asset.storage_key
                    for asset in record_store.list_assets_by_favicon(db, favicon_id)
                ]

            for storage_key in asset_keys:
                await self._discard_object(storage_key)
            await self._discard_object(build_source_key(favicon_id))

            with self.session_factory() as db:
                record_store.delete_favicon_cascade(db, favicon_id)

        except Exception as e:
            logger.error(f"Failed to delete favicon {favicon_id}: {e}", exc_info=True)
            return DeletionResult(id=favicon_id, success=False, error=str(e))

        logger.info(f"Deleted favicon {favicon_id} ({len(asset_keys)} assets)")
        return DeletionResult(id=favicon_id, success=True)

    async def delete_favicons(self, favicon_ids: List[str]) -> List[DeletionResult]:
        """Delete several favicons independently, one result per id."""
        results = []
        for favicon_id in favicon_ids:
            results.append(await self.delete_favicon(favicon_id))

        failed = sum(1 for result in results if not result.success)
        logger.info(f"Batch deletion finished: {len(results) - failed} deleted, {failed} failed")
        return results

    async def _discard_object(self, storage_key: str) -> None:
        try:
            await self.storage.delete_object(storage_key)
        except StorageError as e:
            logger.warning(f"Failed to delete object {storage_key}: {e}")
