"""
Authentication and authorization.

Design principles:
1. The viewer is resolved once per request (`get_viewer`)
2. Content restriction only asks "is anyone logged in?"
3. Admin routes check capabilities derived from the user's role
"""

from arc.auth.context import ViewerContext
from arc.auth.policies import get_viewer, require, require_auth, Policy
from arc.auth.capabilities import Capability, Role
from arc.auth.jwt import (
    TokenPair,
    create_token_pair,
    create_nonce,
    verify_nonce,
    hash_password,
    verify_password,
)
from arc.auth.users import (
    AuthenticationError,
    UserCreate,
    UserResponse,
    UserStore,
)
from arc.auth.routes import router as auth_router

__all__ = [
    # Main interface
    "ViewerContext",
    "get_viewer",
    "require",
    "require_auth",
    "Policy",
    # Types
    "Capability",
    "Role",
    # Tokens
    "TokenPair",
    "create_token_pair",
    "create_nonce",
    "verify_nonce",
    "hash_password",
    "verify_password",
    # Users
    "AuthenticationError",
    "UserCreate",
    "UserResponse",
    "UserStore",
    # Router
    "auth_router",
]
