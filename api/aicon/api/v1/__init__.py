"""API router."""

from fastapi import APIRouter

from aicon.api.v1.endpoints import (
    admin,
    directory,
    favicons,
    health,
    storage,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(favicons.router, prefix="/favicons", tags=["favicons"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
api_router.include_router(directory.router, prefix="/directory", tags=["directory"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
