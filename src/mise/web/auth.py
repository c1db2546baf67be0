"""
Authentication utilities for FastAPI routes.

Auth itself is Supabase's job; this dependency only resolves which owner
a request acts for. With auth disabled (local use) every request is the
configured dev user.
"""

import logging

from fastapi import Header, HTTPException
from pydantic import BaseModel

from mise.config import settings

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Owner that recipe operations are scoped to."""

    id: str
    email: str | None = None
    access_token: str | None = None


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Resolve the current user.

    Expects Authorization header: "Bearer <access_token>" when
    AUTH_ENABLED is set.
    """
    if not settings.auth_enabled:
        return AuthenticatedUser(id=settings.dev_user_id)

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    access_token = authorization[7:]  # Remove "Bearer " prefix

    try:
        from mise.db.client import get_client

        user_response = get_client().auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_response.user
    return AuthenticatedUser(id=user.id, email=user.email, access_token=access_token)
