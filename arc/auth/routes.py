# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/login    - Get tokens (API clients)
#   POST /auth/refresh  - Refresh tokens
#   POST /auth/logout   - Revoke the current session
#   GET  /auth/me       - Get current user
#
# Browsers log in through the site's /login page or the inline AJAX form.
#
# =============================================================================

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from arc.auth.context import ViewerContext
from arc.auth.jwt import (
    TokenPair,
    TokenExpiredError,
    TokenInvalidError,
    create_token_pair,
    refresh_tokens,
)
from arc.auth.policies import get_viewer, require_auth
from arc.auth.sessions import clear_session_cookie, revoke_session
from arc.auth.users import AuthenticationError, UserResponse, to_response

router = APIRouter(prefix="/auth", tags=["auth"])


# =============================================================================
# Request/Response Models
# =============================================================================

class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/login", response_model=TokenPair)
async def login(data: LoginRequest, request: Request):
    """
    Authenticate and get tokens.
    """
    state = request.app.state
    try:
        user = await state.users.authenticate(data.username, data.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))

    return create_token_pair(user.id, state.settings)


@router.post("/refresh", response_model=TokenPair)
async def refresh(data: RefreshRequest, request: Request):
    """
    Use refresh token to get new access token.
    """
    try:
        return refresh_tokens(data.refresh_token, request.app.state.settings)
    except TokenExpiredError:
        raise HTTPException(status_code=401, detail="Refresh token expired, please login again")
    except TokenInvalidError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    viewer: ViewerContext = Depends(get_viewer),
):
    """
    Revoke the session cookie (if any) and clear it.
    """
    state = request.app.state
    await revoke_session(viewer, state.storage, state.settings)
    clear_session_cookie(response, state.settings)
    return {"message": "Logged out successfully"}


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user(
    request: Request,
    viewer: ViewerContext = Depends(require_auth()),
):
    """
    Get the current authenticated user.
    """
    user = await request.app.state.users.get_by_id(viewer.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return to_response(user)
