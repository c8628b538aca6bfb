"""
Policies - route-level authentication and authorization.

Every route that needs to know who is asking depends on `get_viewer`.
Routes that need a logged-in user with specific capabilities use
`Depends(require(...))`.

Design:
- The viewer comes from a bearer token (API clients) or the session
  cookie (browsers, inline login form)
- Bad, expired or revoked tokens resolve to an anonymous viewer
- `require()` raises 401 for anonymous viewers and 403 for missing
  capabilities
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from arc.auth.capabilities import Capability
from arc.auth.context import ViewerContext
from arc.auth.jwt import ACCESS, SESSION, TokenError, decode_token

logger = logging.getLogger(__name__)

# Optional JWT bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)

REVOKED_PREFIX = "revoked:"


async def get_viewer(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> ViewerContext:
    """Resolve the viewer for this request."""
    state = request.app.state
    settings = state.settings

    if credentials:
        token, expected_type = credentials.credentials, ACCESS
    else:
        token, expected_type = request.cookies.get(settings.session_cookie_name), SESSION

    if not token:
        return ViewerContext.anonymous()

    try:
        payload = decode_token(token, expected_type=expected_type, settings=settings)
    except TokenError as e:
        logger.debug(f"Ignoring {expected_type} token: {e}")
        return ViewerContext.anonymous()

    if await state.storage.cache.exists(f"{REVOKED_PREFIX}{payload.jti}"):
        return ViewerContext.anonymous()

    user = await state.users.get_by_id(payload.sub)
    if user is None:
        return ViewerContext.anonymous()

    return ViewerContext(
        user_id=user.id,
        username=user.username,
        display_name=user.display_name,
        role=user.role,
        session_id=payload.jti,
    )


class Policy:
    """
    A policy that can be checked.

        Policy([Capability.EDIT_POSTS])   # logged in + capability
        Policy(require_auth=True)         # just logged in
    """

    def __init__(
        self,
        capabilities: list[Capability] | None = None,
        require_auth: bool = True,
    ):
        self.capabilities = capabilities or []
        self.require_auth = require_auth

    def check(self, viewer: ViewerContext) -> tuple[int, str | None]:
        """
        Check if the viewer satisfies this policy.

        Returns: (status_code, error_message) - 200 and None when allowed
        """
        if self.require_auth and viewer.is_anonymous:
            return 401, "Authentication required"

        missing = [c.value for c in self.capabilities if not viewer.can(c)]
        if missing:
            return 403, f"Missing permissions: {missing}"

        return 200, None


def require(*capabilities: Capability, require_auth: bool = True) -> Callable:
    """
    Require a logged-in viewer with the given capabilities.

    Usage:
        @router.get("/admin/posts")
        async def list_posts(viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS))):
            ...
    """
    policy = Policy(capabilities=list(capabilities), require_auth=require_auth)

    async def dependency(viewer: ViewerContext = Depends(get_viewer)) -> ViewerContext:
        status, error = policy.check(viewer)
        if error:
            raise HTTPException(status_code=status, detail=error)
        return viewer

    return dependency


def require_auth() -> Callable:
    """Just require authentication, no specific capability."""
    return require(require_auth=True)
