"""Pytest configuration and fixtures."""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import aicon.models  # noqa: F401
from aicon.api.deps import get_admin_sessions, get_favicon_service
from aicon.config import Settings
from aicon.database import Base, create_db_engine
from aicon.main import app
from aicon.services.admin_sessions import AdminSessionStore
from aicon.services.favicon_generator import FaviconGeneratorService
from aicon.services.favicon_service import FaviconService
from aicon.storage.local_driver import LocalStorageDriver
from aicon.tasks.spawner import InlineTaskSpawner

ADMIN_PASSWORD = "s3cret-admin"


def make_image_bytes(width=10, height=10, color=(255, 0, 0, 255), fmt="PNG") -> bytes:
    """Solid-color image encoded in the given format."""
    mode = "RGB" if fmt == "JPEG" else "RGBA"
    image = Image.new(mode, (width, height), color[:3] if mode == "RGB" else color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def red_png() -> bytes:
    """10x10 red PNG."""
    return make_image_bytes()


@pytest.fixture
def test_engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def test_db(session_factory):
    """Create a test database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        storage_provider="local",
        storage_root=str(tmp_path / "storage"),
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def storage(test_settings):
    return LocalStorageDriver({"base_path": test_settings.storage_root})


@pytest.fixture
def service(session_factory, storage, test_settings):
    """Favicon service that runs generation before create returns."""
    return FaviconService(
        session_factory=session_factory,
        storage=storage,
        generator=FaviconGeneratorService(),
        spawner=InlineTaskSpawner(),
        settings=test_settings,
    )


@pytest.fixture
def admin_sessions():
    return AdminSessionStore(ADMIN_PASSWORD)


@pytest.fixture
def client(service, admin_sessions):
    """Create a test client wired to the test service."""
    app.dependency_overrides[get_favicon_service] = lambda: service
    app.dependency_overrides[get_admin_sessions] = lambda: admin_sessions
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def image_bytes():
    """Factory for encoded solid-color images."""
    return make_image_bytes


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD
