"""
Browser sessions - issuing, storing and revoking the session cookie.
"""

from __future__ import annotations

from fastapi import Response

from arc.auth.context import ViewerContext
from arc.auth.jwt import create_session_token, session_lifetime
from arc.auth.policies import REVOKED_PREFIX
from arc.config import Settings
from arc.storage.base import StorageProvider


def issue_session(user_id: str, remember: bool, settings: Settings) -> str:
    return create_session_token(user_id, remember=remember, settings=settings)


def set_session_cookie(response: Response, token: str, remember: bool, settings: Settings) -> None:
    """Attach the session cookie. Without "remember me" it's a browser-session cookie."""
    max_age = int(session_lifetime(remember, settings).total_seconds()) if remember else None
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie_name)


async def revoke_session(viewer: ViewerContext, storage: StorageProvider, settings: Settings) -> None:
    """Remember the session's token ID until it would have expired anyway."""
    if not viewer.session_id:
        return
    ttl = int(session_lifetime(True, settings).total_seconds())
    await storage.cache.set(f"{REVOKED_PREFIX}{viewer.session_id}", True, ttl=ttl)
