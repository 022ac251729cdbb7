"""Liveness endpoint."""

from fastapi import APIRouter

from aicon import __version__

router = APIRouter()


@router.get("/healthz")
def liveness():
    """Process is up; dependencies are checked by /health."""
    return {"status": "ok", "version": __version__}
