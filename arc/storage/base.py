"""
Storage interfaces for site content and session state.

The content repository and the user store only talk to these two
interfaces, so the in-memory backends used in development can be replaced
by a database and a shared cache without touching the routes or the plugin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


# =============================================================================
# Storage Interfaces
# =============================================================================


class MetadataStorage(ABC):
    """
    Document store holding one JSON document per post, term, comment, user
    or option, grouped by `Collections` name.

    Documents are plain dicts (`model_dump(mode="json")` output). Restricted
    flags live inside each document's `meta` mapping, so they are saved and
    deleted together with the item they belong to.
    """

    @abstractmethod
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """Insert or replace the document stored under `id`."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Remove a document. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """
        Documents whose top-level fields equal every value in `filters`,
        in insertion order. `limit=None` returns all matches.
        """
        pass


class CacheStorage(ABC):
    """
    Expiring key-value store.

    Holds `revoked:<jti>` markers for logged-out sessions until the session
    token would have expired anyway.
    """

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set a value with optional TTL in seconds."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """True while the key is set and not expired."""
        pass


# =============================================================================
# Storage Provider
# =============================================================================


class StorageProvider(BaseModel):
    """Both backends, built once in `create_app()` and kept on app.state."""

    model_config = {"arbitrary_types_allowed": True}

    metadata: MetadataStorage
    cache: CacheStorage


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Collection names used by the repository and the user store."""

    POSTS = "posts"          # posts and pages
    TERMS = "terms"          # categories and tags
    COMMENTS = "comments"
    USERS = "users"
    OPTIONS = "options"      # one document per option name
