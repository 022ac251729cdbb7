"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from aicon import __version__
from aicon.api.deps import get_favicon_service
from aicon.api.v1 import api_router
from aicon.config import settings
from aicon.database import SessionLocal, init_db
from aicon.observability import setup_logging
from aicon.services.admin_sessions import AdminSessionStore
from aicon.services.favicon_generator import FaviconGeneratorService
from aicon.services.favicon_service import FaviconService
from aicon.storage.factory import get_storage_driver
from aicon.tasks.spawner import AsyncioTaskSpawner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_format)
    init_db()

    spawner = AsyncioTaskSpawner()
    app.state.favicon_service = FaviconService(
        session_factory=SessionLocal,
        storage=get_storage_driver(settings),
        generator=FaviconGeneratorService(),
        spawner=spawner,
        settings=settings,
    )
    app.state.admin_sessions = AdminSessionStore(
        settings.admin_password, settings.admin_session_hours
    )
    logger.info(f"Favicon service started (storage={settings.storage_provider})")

    yield

    if spawner.pending:
        logger.info(f"Waiting for {spawner.pending} generation task(s) to finish")
        await spawner.drain()


app = FastAPI(
    title="A-Icon Favicon Service",
    description="Generate and publish favicon sets from uploaded or drawn images",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict to the web frontend origin once it has a fixed domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check(service: FaviconService = Depends(get_favicon_service)):
    """Health check endpoint."""
    # Check database
    db_status = "disconnected"
    try:
        with service.session_factory() as db:
            db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    # Check storage
    storage_status = "disconnected"
    try:
        if await service.storage.test_connection():
            storage_status = "connected"
    except Exception as e:
        storage_status = f"error: {str(e)}"

    overall_status = "ok" if db_status == "connected" and storage_status == "connected" else "degraded"

    return {
        "status": overall_status,
        "db": db_status,
        "storage": storage_status,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "aicon.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
