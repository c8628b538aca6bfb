"""
Access policy store - the restricted flag on content items and terms.

The flag is a single meta entry (`arc_restricted`) on the item or term.
Reads are fail-open: a missing, unknown or malformed value means the
object is NOT restricted. Only explicit truthy markers count.
"""

from __future__ import annotations

import logging
from typing import Any

from arc.content.repository import ContentRepository
from arc.core.models import ContentItem, PostType, Taxonomy, Term

logger = logging.getLogger(__name__)

RESTRICTED_META_KEY = "arc_restricted"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


def parse_restricted(value: Any) -> bool:
    """
    Read a stored flag value as a boolean.

    True, 1 and the strings "1", "true", "yes", "on" (any case) are
    restricted. Everything else, including garbage, is not.
    """
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUTHY:
            return True
        if normalized not in _FALSY:
            logger.debug(f"Malformed restricted flag {value!r}, treating as unrestricted")
        return False
    logger.debug(f"Malformed restricted flag {value!r}, treating as unrestricted")
    return False


def is_restricted(obj: ContentItem | Term) -> bool:
    """Flag of an already-loaded item or term."""
    return parse_restricted(obj.meta.get(RESTRICTED_META_KEY))


class AccessPolicyStore:
    """
    Reads and writes the restricted flag.

    Usage:
        store = AccessPolicyStore(repo)
        await store.set_post_restricted(post.id, True)
        hidden = await store.restricted_post_ids(PostType.PAGE)
    """

    def __init__(self, repo: ContentRepository):
        self.repo = repo

    # =========================================================================
    # Content items
    # =========================================================================

    async def is_post_restricted(self, post_id: str) -> bool:
        """Unknown posts read as unrestricted."""
        post = await self.repo.get_post(post_id)
        return is_restricted(post) if post else False

    async def set_post_restricted(self, post_id: str, restricted: bool) -> None:
        """Raises NotFoundError for unknown posts."""
        await self.repo.update_post_meta(post_id, RESTRICTED_META_KEY, bool(restricted))
        logger.info(f"Post {post_id} {'restricted' if restricted else 'unrestricted'}")

    async def restricted_post_ids(self, post_type: PostType | None = None) -> set[str]:
        posts = await self.repo.list_posts(post_type)
        return {p.id for p in posts if is_restricted(p)}

    # =========================================================================
    # Terms
    # =========================================================================

    async def is_term_restricted(self, term_id: str) -> bool:
        term = await self.repo.get_term(term_id)
        return is_restricted(term) if term else False

    async def set_term_restricted(self, term_id: str, restricted: bool) -> None:
        await self.repo.update_term_meta(term_id, RESTRICTED_META_KEY, bool(restricted))
        logger.info(f"Term {term_id} {'restricted' if restricted else 'unrestricted'}")

    async def restricted_term_ids(self, taxonomy: Taxonomy | None = None) -> set[str]:
        terms = await self.repo.list_terms(taxonomy)
        return {t.id for t in terms if is_restricted(t)}
