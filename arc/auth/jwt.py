# =============================================================================
# JWT Tokens and Password Hashing
# =============================================================================
#
# This module provides:
#   - Password hashing (PBKDF2-SHA256)
#   - API tokens (access + refresh)
#   - Browser session tokens (cookie, optional "remember me")
#   - Form nonces (short-lived, bound to an action)
#   - Token validation
#
# =============================================================================

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets

from pydantic import BaseModel
import jwt

from arc.config import Settings, get_settings
from arc.core.utils import generate_id, utc_now

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
SESSION = "session"
NONCE = "nonce"


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """Validated JWT claims."""
    sub: str  # user_id, or the action name for nonces
    exp: datetime
    iat: datetime
    type: str
    jti: str  # unique token ID (for revocation)


class TokenPair(BaseModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=100_000
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=100_000
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


# =============================================================================
# Token Creation
# =============================================================================

def _encode(sub: str, token_type: str, lifetime: timedelta, settings: Settings, **claims) -> str:
    now = utc_now()
    payload = {
        "sub": sub,
        "exp": now + lifetime,
        "iat": now,
        "type": token_type,
        "jti": generate_id("tok"),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    lifetime = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(user_id, ACCESS, lifetime, settings)


def create_refresh_token(user_id: str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    lifetime = timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(user_id, REFRESH, lifetime, settings)


def create_token_pair(user_id: str, settings: Settings | None = None) -> TokenPair:
    """Create both access and refresh tokens."""
    settings = settings or get_settings()
    return TokenPair(
        access_token=create_access_token(user_id, settings),
        refresh_token=create_refresh_token(user_id, settings),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


def session_lifetime(remember: bool, settings: Settings | None = None) -> timedelta:
    settings = settings or get_settings()
    days = settings.session_remember_days if remember else settings.session_expire_days
    return timedelta(days=days)


def create_session_token(user_id: str, remember: bool = False, settings: Settings | None = None) -> str:
    """Create the browser session token stored in the session cookie."""
    settings = settings or get_settings()
    return _encode(user_id, SESSION, session_lifetime(remember, settings), settings)


def create_nonce(action: str, settings: Settings | None = None) -> str:
    """Create a form nonce bound to `action`."""
    settings = settings or get_settings()
    return _encode(action, NONCE, timedelta(hours=settings.nonce_expire_hours), settings)


# =============================================================================
# Token Validation
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid or malformed."""
    pass


def decode_token(token: str, expected_type: str = ACCESS, settings: Settings | None = None) -> TokenPayload:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT string
        expected_type: "access", "refresh", "session" or "nonce"

    Returns:
        TokenPayload with validated claims

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        if payload.get("type") != expected_type:
            raise TokenInvalidError(f"Expected {expected_type} token, got {payload.get('type')}")

        return TokenPayload(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            jti=payload.get("jti", ""),
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")


def verify_nonce(nonce: str, action: str, settings: Settings | None = None) -> bool:
    """True if `nonce` is a valid, unexpired nonce for `action`."""
    try:
        payload = decode_token(nonce, expected_type=NONCE, settings=settings)
    except TokenError as e:
        logger.debug(f"Rejected nonce for {action}: {e}")
        return False
    return payload.sub == action


def refresh_tokens(refresh_token: str, settings: Settings | None = None) -> TokenPair:
    """Use a refresh token to get new access and refresh tokens."""
    payload = decode_token(refresh_token, expected_type=REFRESH, settings=settings)
    return create_token_pair(payload.sub, settings)
