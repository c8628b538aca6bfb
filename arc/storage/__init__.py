"""
Storage abstractions.

- MetadataStorage → posts, terms, comments, users, options
- CacheStorage → revoked session tokens
"""

from arc.storage.base import (
    MetadataStorage,
    CacheStorage,
    StorageProvider,
    Collections,
)
from arc.storage.local import create_local_storage

__all__ = [
    "MetadataStorage",
    "CacheStorage",
    "StorageProvider",
    "Collections",
    "create_local_storage",
]
