"""
Content repository - typed access to posts, terms, comments and options.

Wraps MetadataStorage so the rest of the code deals in models, not dicts.
Also owns the meta registry: which meta keys exist for which object type,
their defaults and whether they're exposed over REST.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from arc.core.models import Comment, ContentItem, PostStatus, PostType, Taxonomy, Term
from arc.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when an object with the given ID doesn't exist."""
    pass


@dataclass(frozen=True)
class MetaSpec:
    """Registration record for a meta key."""

    key: str
    type: str = "string"
    default: Any = None
    description: str = ""
    show_in_rest: bool = False


POST_OBJECT = "post"
TERM_OBJECT = "term"


class ContentRepository:
    """Typed CRUD over the metadata store."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage
        self._meta: dict[str, dict[str, MetaSpec]] = {POST_OBJECT: {}, TERM_OBJECT: {}}

    # =========================================================================
    # Meta registry
    # =========================================================================

    def register_meta(self, object_type: str, entry: MetaSpec) -> None:
        if object_type not in self._meta:
            raise ValueError(f"Unknown object type '{object_type}'")
        self._meta[object_type][entry.key] = entry
        logger.debug(f"Registered {object_type} meta '{entry.key}'")

    def registered_meta(self, object_type: str) -> list[MetaSpec]:
        return list(self._meta.get(object_type, {}).values())

    def rest_meta(self, object_type: str, meta: dict[str, Any]) -> dict[str, Any]:
        """Registered REST-visible meta values, defaults filled in."""
        return {
            entry.key: meta.get(entry.key, entry.default)
            for entry in self.registered_meta(object_type)
            if entry.show_in_rest
        }

    # =========================================================================
    # Posts and pages
    # =========================================================================

    async def save_post(self, post: ContentItem) -> ContentItem:
        await self.storage.metadata.save(Collections.POSTS, post.id, post.model_dump(mode="json"))
        return post

    async def get_post(self, post_id: str) -> ContentItem | None:
        data = await self.storage.metadata.get(Collections.POSTS, post_id)
        return ContentItem.model_validate(data) if data else None

    async def require_post(self, post_id: str) -> ContentItem:
        post = await self.get_post(post_id)
        if post is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        return post

    async def get_post_by_slug(
        self,
        slug: str,
        post_type: PostType | None = None,
        status: PostStatus | None = None,
    ) -> ContentItem | None:
        filters: dict[str, Any] = {"slug": slug}
        if post_type is not None:
            filters["post_type"] = post_type.value
        if status is not None:
            filters["status"] = status.value
        rows = await self.storage.metadata.query(Collections.POSTS, filters, limit=1)
        return ContentItem.model_validate(rows[0]) if rows else None

    async def list_posts(self, post_type: PostType | None = None) -> list[ContentItem]:
        filters = {"post_type": post_type.value} if post_type is not None else None
        rows = await self.storage.metadata.query(Collections.POSTS, filters)
        return [ContentItem.model_validate(row) for row in rows]

    async def delete_post(self, post_id: str) -> bool:
        return await self.storage.metadata.delete(Collections.POSTS, post_id)

    async def get_post_meta(self, post_id: str, key: str) -> Any:
        post = await self.require_post(post_id)
        return post.meta.get(key)

    async def update_post_meta(self, post_id: str, key: str, value: Any) -> None:
        post = await self.require_post(post_id)
        post.meta[key] = value
        post.touch()
        await self.save_post(post)

    # =========================================================================
    # Terms
    # =========================================================================

    async def save_term(self, term: Term) -> Term:
        await self.storage.metadata.save(Collections.TERMS, term.id, term.model_dump(mode="json"))
        return term

    async def get_term(self, term_id: str) -> Term | None:
        data = await self.storage.metadata.get(Collections.TERMS, term_id)
        return Term.model_validate(data) if data else None

    async def require_term(self, term_id: str) -> Term:
        term = await self.get_term(term_id)
        if term is None:
            raise NotFoundError(f"Term '{term_id}' not found")
        return term

    async def get_term_by_slug(self, taxonomy: Taxonomy, slug: str) -> Term | None:
        rows = await self.storage.metadata.query(
            Collections.TERMS, {"taxonomy": taxonomy.value, "slug": slug}, limit=1
        )
        return Term.model_validate(rows[0]) if rows else None

    async def list_terms(self, taxonomy: Taxonomy | None = None) -> list[Term]:
        filters = {"taxonomy": taxonomy.value} if taxonomy is not None else None
        rows = await self.storage.metadata.query(Collections.TERMS, filters)
        return [Term.model_validate(row) for row in rows]

    async def get_term_meta(self, term_id: str, key: str) -> Any:
        term = await self.require_term(term_id)
        return term.meta.get(key)

    async def update_term_meta(self, term_id: str, key: str, value: Any) -> None:
        term = await self.require_term(term_id)
        term.meta[key] = value
        await self.save_term(term)

    async def count_term_posts(self, term_id: str) -> int:
        posts = await self.list_posts(PostType.POST)
        return sum(1 for p in posts if p.is_published and term_id in p.term_ids)

    # =========================================================================
    # Comments
    # =========================================================================

    async def save_comment(self, comment: Comment) -> Comment:
        await self.storage.metadata.save(
            Collections.COMMENTS, comment.id, comment.model_dump(mode="json")
        )
        return comment

    async def list_comments(self, post_id: str | None = None) -> list[Comment]:
        filters = {"post_id": post_id} if post_id else None
        rows = await self.storage.metadata.query(Collections.COMMENTS, filters)
        return [Comment.model_validate(row) for row in rows]

    # =========================================================================
    # Options
    # =========================================================================

    async def get_option(self, name: str, default: Any = None) -> Any:
        data = await self.storage.metadata.get(Collections.OPTIONS, name)
        if data is None:
            return default
        return data.get("value", default)

    async def update_option(self, name: str, value: Any) -> None:
        await self.storage.metadata.save(Collections.OPTIONS, name, {"value": value})

    async def add_option(self, name: str, value: Any) -> bool:
        """Store `value` only if the option doesn't exist yet."""
        if await self.storage.metadata.get(Collections.OPTIONS, name) is not None:
            return False
        await self.update_option(name, value)
        return True
