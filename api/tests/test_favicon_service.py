"""Tests for the favicon creation pipeline."""

import asyncio
import io

import pytest
from PIL import Image

from aicon.exceptions import NotFoundError, PersistenceError, StorageError, ValidationError
from aicon.models.favicon import Favicon
from aicon.schemas.favicon import AssetType, DedupPolicy, GenerationStatus, SourceType
from aicon.services import record_store
from aicon.services.favicon_generator import FaviconGeneratorService
from aicon.services.favicon_service import (
    ID_ALPHABET,
    FaviconService,
    build_asset_key,
    build_source_key,
    compute_fingerprint,
    normalize_embedded_metadata,
)
from aicon.storage.local_driver import LocalStorageDriver
from aicon.tasks.spawner import AsyncioTaskSpawner, InlineTaskSpawner, TaskSpawner


class FlakyStorageDriver(LocalStorageDriver):
    """Local driver that fails puts or deletes for keys containing a marker."""

    def __init__(self, config, fail_put_on=None, fail_delete_on=None):
        super().__init__(config)
        self.fail_put_on = fail_put_on
        self.fail_delete_on = fail_delete_on

    async def put_object(self, key, content, content_type):
        if self.fail_put_on and self.fail_put_on in key:
            raise StorageError(f"Failed to write object {key}: disk full")
        return await super().put_object(key, content, content_type)

    async def delete_object(self, key):
        if self.fail_delete_on and self.fail_delete_on in key:
            raise StorageError(f"Failed to delete object {key}: permission denied")
        await super().delete_object(key)


class DeferredTaskSpawner(TaskSpawner):
    """Collects jobs so a test can observe state before generation runs."""

    def __init__(self):
        self.jobs = []

    async def spawn(self, job, on_error):
        self.jobs.append((job, on_error))

    async def run_all(self):
        inline = InlineTaskSpawner()
        while self.jobs:
            job, on_error = self.jobs.pop(0)
            await inline.spawn(job, on_error)


def build_service(session_factory, storage, settings, spawner=None):
    return FaviconService(
        session_factory=session_factory,
        storage=storage,
        generator=FaviconGeneratorService(),
        spawner=spawner or InlineTaskSpawner(),
        settings=settings,
    )


def create(service, source, **kwargs):
    kwargs.setdefault("content_type", "image/png")
    kwargs.setdefault("source_type", SourceType.UPLOAD)
    return asyncio.run(service.create_favicon(source, **kwargs))


class TestHelpers:
    """Tests for key and fingerprint helpers."""

    def test_fingerprint(self):
        assert compute_fingerprint(b"abc") == ("900150983cd24fb0d6963f7d28e17f72", 3)

    def test_normalize_metadata(self):
        assert normalize_embedded_metadata(None) is None
        assert normalize_embedded_metadata("   ") is None
        assert normalize_embedded_metadata("  hi  ") == "hi"

    def test_keys(self):
        assert build_source_key("abc") == "sources/abc/original"
        assert build_asset_key("s1", "16x16", ".png", "test.io") == "favicons/s1/16x16-test.io.png"
        assert build_asset_key("s1", "MULTI", ".ico", "test.io") == "favicons/s1/favicon-test.io.ico"


class TestCreateFavicon:
    """Tests for FaviconService.create_favicon."""

    def test_returns_pending_record_before_generation(self, session_factory, storage, test_settings, red_png):
        spawner = DeferredTaskSpawner()
        service = build_service(session_factory, storage, test_settings, spawner)

        created = create(service, red_png, target_domain="test.io")

        assert len(created.id) == 21
        assert len(created.slug) == 10
        assert set(created.id + created.slug) <= set(ID_ALPHABET)

        favicon = service.get_favicon(created.id)
        assert favicon.generation_status == GenerationStatus.PENDING
        assert favicon.generated_at is None
        assert favicon.published_url == f"/f/{created.slug}"
        assert favicon.is_published is True
        assert len(spawner.jobs) == 1

        # Source is stored before the record is visible
        assert asyncio.run(storage.get_object(f"sources/{created.id}/original")) == red_png

        asyncio.run(spawner.run_all())
        assert service.get_favicon(created.id).generation_status == GenerationStatus.SUCCESS

    def test_generates_all_assets(self, service, storage, red_png):
        created = create(service, red_png, target_domain="test.io", title="Red")

        favicon, assets = service.get_favicon_detail(created.slug)

        assert favicon.generation_status == GenerationStatus.SUCCESS
        assert favicon.generation_error is None
        assert favicon.generated_at is not None
        assert favicon.generated_at >= favicon.created_at
        assert favicon.title == "Red"
        assert favicon.source_type == SourceType.UPLOAD
        assert (favicon.source_hash, favicon.source_size) == compute_fingerprint(red_png)

        assert len(assets) == 14
        assert sum(1 for a in assets if a.type == AssetType.PNG) == 13
        assert sum(1 for a in assets if a.type == AssetType.ICO) == 1

        keys = {a.storage_key for a in assets}
        assert f"favicons/{created.slug}/16x16-test.io.png" in keys
        assert f"favicons/{created.slug}/180x180-test.io.png" in keys
        assert f"favicons/{created.slug}/favicon-test.io.ico" in keys

        content = asyncio.run(storage.get_object(f"favicons/{created.slug}/16x16-test.io.png"))
        assert Image.open(io.BytesIO(content)).size == (16, 16)

    def test_default_domain_in_keys(self, service, red_png):
        created = create(service, red_png)

        favicon, assets = service.get_favicon_detail(created.slug)
        assert favicon.target_domain is None
        assert all(a.storage_key.endswith(("-a-icon.com.png", "-a-icon.com.ico")) for a in assets)

    def test_metadata_is_trimmed_and_stored(self, service, red_png):
        created = create(service, red_png, embedded_metadata="  hello  ")

        favicon = service.get_favicon(created.id)
        assert favicon.embedded_metadata == "hello"
        assert favicon.has_steganography is False

    def test_blank_metadata_stored_as_null(self, service, red_png):
        created = create(service, red_png, embedded_metadata="   ")
        assert service.get_favicon(created.id).embedded_metadata is None

    def test_undecodable_source_fails_generation(self, service, storage):
        source = b"\x89PNG but not really a png"

        created = create(service, source)

        favicon, assets = service.get_favicon_detail(created.slug)
        assert favicon.generation_status == GenerationStatus.FAILED
        assert favicon.generation_error == "Unsupported image format"
        assert favicon.generated_at is None
        assert assets == []
        assert asyncio.run(storage.get_object(f"sources/{created.id}/original")) == source

    def test_unknown_source_type(self, service, red_png):
        with pytest.raises(ValidationError):
            create(service, red_png, source_type="SCAN")

        assert service.list_directory()[1] == 0

    def test_source_store_failure_aborts(self, session_factory, test_settings, red_png):
        storage = FlakyStorageDriver({"base_path": test_settings.storage_root}, fail_put_on="sources/")
        service = build_service(session_factory, storage, test_settings)

        with pytest.raises(StorageError):
            create(service, red_png)

        with session_factory() as db:
            assert db.query(Favicon).count() == 0

    def test_record_insert_failure_discards_source(self, service, storage, red_png, monkeypatch):
        def broken_insert(db, favicon):
            raise PersistenceError("database is locked", "insert favicon")

        monkeypatch.setattr(record_store, "insert_favicon", broken_insert)

        with pytest.raises(PersistenceError):
            create(service, red_png)

        assert not list(storage.base_path.glob("sources/*/original"))

    def test_partial_failure_keeps_stored_assets(self, session_factory, test_settings, red_png):
        storage = FlakyStorageDriver({"base_path": test_settings.storage_root}, fail_put_on="128x128")
        service = build_service(session_factory, storage, test_settings)

        created = create(service, red_png, target_domain="test.io")

        favicon, assets = service.get_favicon_detail(created.slug)
        assert favicon.generation_status == GenerationStatus.FAILED
        assert "128x128" in favicon.generation_error
        assert {a.size for a in assets} == {"16x16", "32x32", "48x48", "64x64", "96x96"}

    def test_distinct_slugs(self, service, red_png, image_bytes):
        first = create(service, red_png)
        second = create(service, image_bytes(color=(0, 0, 255, 255)))

        assert first.id != second.id
        assert first.slug != second.slug


class TestDeduplication:
    """Tests for identical source handling."""

    def test_always_create(self, service, red_png):
        first = create(service, red_png)
        second = create(service, red_png)

        assert first.id != second.id
        assert first.slug != second.slug
        assert service.get_favicon(second.id).generation_status == GenerationStatus.SUCCESS

    def test_reuse_existing(self, session_factory, storage, test_settings, red_png):
        settings = test_settings.model_copy(update={"dedup_policy": DedupPolicy.REUSE_EXISTING})
        service = build_service(session_factory, storage, settings)

        first = create(service, red_png)
        second = create(service, red_png)

        assert second == first
        with session_factory() as db:
            assert db.query(Favicon).count() == 1

    def test_reuse_returns_failed_record(self, session_factory, storage, test_settings):
        settings = test_settings.model_copy(update={"dedup_policy": DedupPolicy.REUSE_EXISTING})
        service = build_service(session_factory, storage, settings)

        first = create(service, b"GIF89a broken")
        second = create(service, b"GIF89a broken")

        assert second.id == first.id
        assert service.get_favicon(first.id).generation_status == GenerationStatus.FAILED


class TestBackgroundGeneration:
    """Tests for generation on the asyncio spawner."""

    def test_create_returns_before_generation(self, session_factory, storage, test_settings, red_png):
        async def scenario():
            spawner = AsyncioTaskSpawner()
            service = build_service(session_factory, storage, test_settings, spawner)

            created = await service.create_favicon(red_png, "image/png", SourceType.CANVAS)
            status_at_return = service.get_favicon(created.id).generation_status
            pending = spawner.pending

            await spawner.drain()
            return service, created, status_at_return, pending

        service, created, status_at_return, pending = asyncio.run(scenario())

        assert status_at_return == GenerationStatus.PENDING
        assert pending == 1
        assert service.get_favicon(created.id).generation_status == GenerationStatus.SUCCESS

    def test_concurrent_creations(self, session_factory, storage, test_settings, image_bytes):
        async def scenario():
            spawner = AsyncioTaskSpawner()
            service = build_service(session_factory, storage, test_settings, spawner)

            created = await asyncio.gather(
                service.create_favicon(image_bytes(color=(255, 0, 0, 255)), "image/png", SourceType.UPLOAD),
                service.create_favicon(image_bytes(color=(0, 255, 0, 255)), "image/png", SourceType.UPLOAD),
                service.create_favicon(b"garbage bytes", "image/png", SourceType.UPLOAD),
            )
            await spawner.drain()
            return service, created

        service, created = asyncio.run(scenario())

        statuses = [service.get_favicon(c.id).generation_status for c in created]
        assert statuses == [GenerationStatus.SUCCESS, GenerationStatus.SUCCESS, GenerationStatus.FAILED]


class TestReads:
    """Tests for lookups and blob reads."""

    def test_get_missing(self, service):
        with pytest.raises(NotFoundError):
            service.get_favicon("missing")

        with pytest.raises(NotFoundError):
            service.get_favicon_detail("missing")

    def test_read_source_sniffs_type(self, service, image_bytes):
        jpeg = image_bytes(fmt="JPEG")
        created = create(service, jpeg, content_type="image/jpeg")

        assert asyncio.run(service.read_source(created.id)) == (jpeg, "image/jpeg")

    def test_read_asset(self, service, red_png):
        created = create(service, red_png, target_domain="test.io")

        content, mime_type = asyncio.run(
            service.read_asset(f"favicons/{created.slug}/favicon-test.io.ico")
        )
        assert mime_type == "image/x-icon"
        assert Image.open(io.BytesIO(content)).format == "ICO"

    def test_read_missing_asset(self, service):
        with pytest.raises(NotFoundError):
            asyncio.run(service.read_asset("favicons/nope/16x16-a-icon.com.png"))

    def test_list_directory(self, service, red_png):
        created = create(service, red_png, target_domain="test.io")

        rows, total = service.list_directory()

        assert total == 1
        assert rows[0][0].id == created.id
        assert rows[0][1] == 14


class TestDeleteFavicon:
    """Tests for deletion."""

    def test_delete_removes_rows_and_blobs(self, service, storage, red_png):
        created = create(service, red_png, target_domain="test.io")

        result = asyncio.run(service.delete_favicon(created.id))

        assert result.success is True
        assert result.error is None
        with pytest.raises(NotFoundError):
            service.get_favicon(created.id)
        assert not any(p.is_file() for p in storage.base_path.rglob("*"))

    def test_delete_missing(self, service):
        result = asyncio.run(service.delete_favicon("missing"))

        assert result.success is False
        assert result.error == "Not found"

    def test_blob_failure_does_not_block_delete(self, session_factory, test_settings, red_png):
        storage = FlakyStorageDriver({"base_path": test_settings.storage_root}, fail_delete_on="32x32")
        service = build_service(session_factory, storage, test_settings)
        created = create(service, red_png, target_domain="test.io")

        result = asyncio.run(service.delete_favicon(created.id))

        assert result.success is True
        with pytest.raises(NotFoundError):
            service.get_favicon(created.id)
        # Only the blob that failed to delete is left behind
        leftovers = [p.name for p in storage.base_path.rglob("*") if p.is_file()]
        assert leftovers == ["32x32-test.io.png"]

    def test_batch_results_are_independent(self, service, red_png, image_bytes):
        first = create(service, red_png)
        second = create(service, image_bytes(color=(0, 0, 255, 255)))

        results = asyncio.run(service.delete_favicons([first.id, "missing", second.id]))

        assert [(r.id, r.success) for r in results] == [
            (first.id, True),
            ("missing", False),
            (second.id, True),
        ]
        assert results[1].error == "Not found"

    def test_delete_while_generation_pending(self, session_factory, storage, test_settings, red_png):
        spawner = DeferredTaskSpawner()
        service = build_service(session_factory, storage, test_settings, spawner)
        created = create(service, red_png)

        assert asyncio.run(service.delete_favicon(created.id)).success is True

        # The orphaned generation job fails quietly
        asyncio.run(spawner.run_all())
        with pytest.raises(NotFoundError):
            service.get_favicon(created.id)
