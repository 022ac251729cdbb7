"""API dependencies."""

from typing import Optional

from fastapi import Header, HTTPException, Request, status

from aicon.services.admin_sessions import AdminSessionStore
from aicon.services.favicon_service import FaviconService


def get_favicon_service(request: Request) -> FaviconService:
    """Get the favicon service created at startup."""
    return request.app.state.favicon_service


def get_admin_sessions(request: Request) -> AdminSessionStore:
    """Get the admin session store created at startup."""
    return request.app.state.admin_sessions


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the bearer token from the Authorization header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
        )
    return authorization[len("Bearer "):]
