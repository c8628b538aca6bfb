"""
User accounts and credential checks.

This is the host's authentication system. Failures are raised as
AuthenticationError subclasses whose messages are meant to be shown to
the person logging in, unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from arc.auth.capabilities import Role
from arc.auth.jwt import hash_password, verify_password
from arc.core.utils import generate_id, utc_now
from arc.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class UserCreate(BaseModel):
    """User registration data."""
    username: str = Field(min_length=1, max_length=60)
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: str = ""
    role: Role = Role.SUBSCRIBER


class UserInDB(BaseModel):
    """User stored in database."""
    id: str
    username: str
    email: str
    display_name: str
    password_hash: str
    role: Role = Role.SUBSCRIBER
    created_at: datetime
    updated_at: datetime


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""
    id: str
    username: str
    email: str
    display_name: str
    role: Role
    created_at: datetime


# =============================================================================
# Errors
# =============================================================================

class AuthenticationError(Exception):
    """Login failed. The message is user-facing."""
    pass


class EmptyCredentialsError(AuthenticationError):
    pass


class UnknownUserError(AuthenticationError):
    pass


class IncorrectPasswordError(AuthenticationError):
    pass


class UserExistsError(ValueError):
    pass


# =============================================================================
# Store
# =============================================================================

class UserStore:
    """Users kept in the metadata store."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    async def create_user(self, data: UserCreate) -> UserInDB:
        """Create a new user."""
        if await self.get_by_login(data.username) or await self.get_by_login(data.email):
            raise UserExistsError("Username or email already registered")

        now = utc_now()
        user = UserInDB(
            id=generate_id("user"),
            username=data.username,
            email=data.email.lower(),
            display_name=data.display_name or data.username,
            password_hash=hash_password(data.password),
            role=data.role,
            created_at=now,
            updated_at=now,
        )
        await self.storage.metadata.save(Collections.USERS, user.id, user.model_dump(mode="json"))
        logger.info(f"Created user {user.username} ({user.role.value})")
        return user

    async def get_by_id(self, user_id: str) -> UserInDB | None:
        data = await self.storage.metadata.get(Collections.USERS, user_id)
        return UserInDB.model_validate(data) if data else None

    async def get_by_login(self, login: str) -> UserInDB | None:
        """Look a user up by username, or by email if `login` contains '@'."""
        if "@" in login:
            rows = await self.storage.metadata.query(Collections.USERS, {"email": login.lower()}, limit=1)
        else:
            rows = await self.storage.metadata.query(Collections.USERS, {"username": login}, limit=1)
        return UserInDB.model_validate(rows[0]) if rows else None

    async def authenticate(self, login: str, password: str) -> UserInDB:
        """
        Check credentials.

        Raises:
            EmptyCredentialsError: username or password missing
            UnknownUserError: no such user
            IncorrectPasswordError: password doesn't match
        """
        login = (login or "").strip()
        if not login:
            raise EmptyCredentialsError("The username field is empty.")
        if not password:
            raise EmptyCredentialsError("The password field is empty.")

        user = await self.get_by_login(login)
        if user is None:
            if "@" in login:
                raise UnknownUserError("Unknown email address. Check again or try your username.")
            raise UnknownUserError("Unknown username. Check again or try your email address.")

        if not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {user.username}")
            raise IncorrectPasswordError(
                f"The password you entered for the username {user.username} is incorrect."
            )

        return user


def to_response(user: UserInDB) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        display_name=user.display_name,
        role=user.role,
        created_at=user.created_at,
    )
