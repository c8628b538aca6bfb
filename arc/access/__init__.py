"""
Access policy - which posts, pages and terms are for logged-in users only.
"""

from arc.access.store import (
    AccessPolicyStore,
    RESTRICTED_META_KEY,
    is_restricted,
    parse_restricted,
)

__all__ = [
    "AccessPolicyStore",
    "RESTRICTED_META_KEY",
    "is_restricted",
    "parse_restricted",
]
