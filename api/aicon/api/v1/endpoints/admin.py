"""Admin endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from aicon.api.deps import get_admin_sessions, get_bearer_token, get_favicon_service
from aicon.schemas.admin import (
    AdminDeleteRequest,
    AdminDeleteResponse,
    AdminLoginRequest,
    AdminLoginResponse,
)
from aicon.services.admin_sessions import AdminSessionStore
from aicon.services.favicon_service import FaviconService

router = APIRouter()


def require_admin(
    token: str = Depends(get_bearer_token),
    sessions: AdminSessionStore = Depends(get_admin_sessions),
) -> str:
    """Reject requests without a valid admin session."""
    if not sessions.verify(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return token


@router.post("/login", response_model=AdminLoginResponse)
def login(request: AdminLoginRequest, sessions: AdminSessionStore = Depends(get_admin_sessions)):
    """Verify the admin password and issue a session token."""
    token = sessions.login(request.password)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    return AdminLoginResponse(token=token)


@router.post("/logout")
def logout(
    token: str = Depends(get_bearer_token),
    sessions: AdminSessionStore = Depends(get_admin_sessions),
):
    """Invalidate the session token."""
    sessions.logout(token)
    return {"success": True}


@router.post("/verify")
def verify(token: str = Depends(require_admin)):
    """Check the session token is still valid."""
    return {"valid": True}


@router.delete("/favicons", response_model=AdminDeleteResponse)
async def delete_favicons(
    request: AdminDeleteRequest,
    token: str = Depends(require_admin),
    service: FaviconService = Depends(get_favicon_service),
):
    """Permanently delete favicons; each id reports its own outcome."""
    results = await service.delete_favicons(request.ids)
    return AdminDeleteResponse(results=results)
