"""
In-memory backends, used by the development server and the test suite.

Everything is lost on restart; the site seed in config/site.yaml is loaded
again on every startup.
"""

from __future__ import annotations

import copy
import time
from typing import Any

from arc.storage.base import (
    MetadataStorage,
    CacheStorage,
    StorageProvider,
)


# =============================================================================
# Documents
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """Collections of documents in nested dicts, copied on the way in and out."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        self._data.setdefault(collection, {})[id] = copy.deepcopy(data)

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        # Callers get their own copy so edits don't leak into the store
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, collection: str, id: str) -> bool:
        return self._data.get(collection, {}).pop(id, None) is not None

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        docs = self._data.get(collection, {}).values()
        if filters:
            docs = [d for d in docs if all(d.get(k) == v for k, v in filters.items())]
        else:
            docs = list(docs)

        end = None if limit is None else offset + limit
        return copy.deepcopy(docs[offset:end])


# =============================================================================
# Cache
# =============================================================================


class InMemoryCacheStorage(CacheStorage):
    """Dict cache; expired keys are dropped when next read."""

    def __init__(self):
        self._cache: dict[str, tuple[Any, float | None]] = {}

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = time.time() + ttl if ttl else None
        self._cache[key] = (value, expires_at)

    async def get(self, key: str) -> Any | None:
        if key not in self._cache:
            return None

        value, expires_at = self._cache[key]
        if expires_at is not None and time.time() > expires_at:
            del self._cache[key]
            return None

        return value

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with in-memory implementations."""
    return StorageProvider(
        metadata=InMemoryMetadataStorage(),
        cache=InMemoryCacheStorage(),
    )
