"""
Site seed loader.

Loads a YAML file describing users, terms and content into the stores,
so a fresh in-memory site has something to show.

Layout:

    users:
      - {username: admin, email: admin@example.com, password: ..., role: administrator}
    categories:
      - {name: Members, slug: members, restricted: true}
    tags:
      - {name: News}
    posts:
      - {title: Hello, author: admin, categories: [members], tags: [news], restricted: true}
    pages:
      - {title: About, menu_order: 1}
    comments:
      - {post: hello, author_name: Ann, content: Nice}
    options:
      arc_options: {login_message: "..."}

Terms and comments refer to posts and terms by slug. Anything may carry
`restricted: true`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from arc.access.store import AccessPolicyStore, parse_restricted
from arc.auth.users import UserCreate, UserStore
from arc.content.repository import ContentRepository
from arc.core.models import Comment, ContentItem, PostStatus, PostType, Taxonomy, Term
from arc.core.utils import slugify

logger = logging.getLogger(__name__)


class SiteLoaderError(ValueError):
    """The seed file refers to something that doesn't exist."""
    pass


class SiteLoader:
    """
    Loads a site seed into the stores.

    Usage:
        loader = SiteLoader(repo, users, access)
        counts = await loader.load_file("config/site.yaml")
    """

    def __init__(self, repo: ContentRepository, users: UserStore, access: AccessPolicyStore):
        self.repo = repo
        self.users = users
        self.access = access

        # username -> user id, (taxonomy, slug) -> term id, slug -> post id
        self._users: dict[str, str] = {}
        self._terms: dict[tuple[Taxonomy, str], str] = {}
        self._posts: dict[str, str] = {}

    async def load_file(self, path: Path | str) -> dict[str, int]:
        """Load a seed from YAML."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        counts = await self.load(data)
        logger.info(f"Loaded site seed {path}: {counts}")
        return counts

    async def load(self, data: dict[str, Any]) -> dict[str, int]:
        """
        Load an already-parsed seed.

        Returns:
            Dict with counts of each type loaded
        """
        counts = {"users": 0, "terms": 0, "posts": 0, "pages": 0, "comments": 0, "options": 0}

        for entry in data.get("users", []):
            await self._load_user(entry)
            counts["users"] += 1

        for key, taxonomy in (("categories", Taxonomy.CATEGORY), ("tags", Taxonomy.TAG)):
            for entry in data.get(key, []):
                await self._load_term(entry, taxonomy)
                counts["terms"] += 1

        for key, post_type in (("posts", PostType.POST), ("pages", PostType.PAGE)):
            for entry in data.get(key, []):
                await self._load_post(entry, post_type)
                counts[key] += 1

        for entry in data.get("comments", []):
            await self._load_comment(entry)
            counts["comments"] += 1

        for name, value in (data.get("options") or {}).items():
            await self.repo.update_option(name, value)
            counts["options"] += 1

        return counts

    # =========================================================================
    # Entries
    # =========================================================================

    async def _load_user(self, entry: dict[str, Any]) -> None:
        existing = await self.users.get_by_login(entry["username"])
        if existing is not None:
            self._users[existing.username] = existing.id
            return
        user = await self.users.create_user(UserCreate.model_validate(entry))
        self._users[user.username] = user.id

    async def _load_term(self, entry: dict[str, Any], taxonomy: Taxonomy) -> None:
        slug = entry.get("slug") or slugify(entry["name"])
        parent = entry.get("parent")
        term = Term(
            taxonomy=taxonomy,
            name=entry["name"],
            slug=slug,
            description=entry.get("description", ""),
            parent_id=self._term_id(taxonomy, parent) if parent else None,
        )
        if "id" in entry:
            term.id = entry["id"]
        await self.repo.save_term(term)
        self._terms[(taxonomy, slug)] = term.id

        if parse_restricted(entry.get("restricted")):
            await self.access.set_term_restricted(term.id, True)

    async def _load_post(self, entry: dict[str, Any], post_type: PostType) -> None:
        slug = entry.get("slug") or slugify(entry["title"])
        author = entry.get("author")
        if author is not None and author not in self._users:
            raise SiteLoaderError(f"Unknown author '{author}' for '{slug}'")

        post = ContentItem(
            post_type=post_type,
            title=entry["title"],
            slug=slug,
            content=entry.get("content", ""),
            excerpt=entry.get("excerpt", ""),
            status=PostStatus(entry.get("status", PostStatus.PUBLISH.value)),
            author_id=self._users.get(author) if author else None,
            parent_id=self._post_id(entry["parent"]) if entry.get("parent") else None,
            menu_order=entry.get("menu_order", 0),
            categories=[self._term_id(Taxonomy.CATEGORY, s) for s in entry.get("categories", [])],
            tags=[self._term_id(Taxonomy.TAG, s) for s in entry.get("tags", [])],
        )
        if "id" in entry:
            post.id = entry["id"]
        await self.repo.save_post(post)
        self._posts[slug] = post.id

        if parse_restricted(entry.get("restricted")):
            await self.access.set_post_restricted(post.id, True)

    async def _load_comment(self, entry: dict[str, Any]) -> None:
        comment = Comment(
            post_id=self._post_id(entry["post"]),
            author_name=entry["author_name"],
            content=entry["content"],
            approved=entry.get("approved", True),
        )
        await self.repo.save_comment(comment)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _term_id(self, taxonomy: Taxonomy, slug: str) -> str:
        try:
            return self._terms[(taxonomy, slug)]
        except KeyError:
            raise SiteLoaderError(f"Unknown {taxonomy.value} '{slug}'") from None

    def _post_id(self, slug: str) -> str:
        try:
            return self._posts[slug]
        except KeyError:
            raise SiteLoaderError(f"Unknown post '{slug}'") from None


async def load_site(
    path: Path | str,
    repo: ContentRepository,
    users: UserStore,
    access: AccessPolicyStore,
) -> dict[str, int]:
    """
    Convenience function to load a seed file.

    Returns:
        Dict with counts of each type loaded
    """
    loader = SiteLoader(repo, users, access)
    return await loader.load_file(path)
