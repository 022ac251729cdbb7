"""Admin schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    """Admin login request."""

    password: str = Field(..., min_length=1)


class AdminLoginResponse(BaseModel):
    """Session token issued on login."""

    token: str


class AdminDeleteRequest(BaseModel):
    """Batch deletion request."""

    ids: List[str] = Field(..., min_length=1, description="Favicon IDs to delete")


class DeletionResult(BaseModel):
    """Outcome of deleting one favicon."""

    id: str
    success: bool
    error: Optional[str] = None


class AdminDeleteResponse(BaseModel):
    """Per-id results of a batch deletion."""

    results: List[DeletionResult]
