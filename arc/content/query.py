"""
Content queries.

A query is a plain pydantic model describing what to fetch. Plugins get a
chance to narrow it (through PRE_GET_POSTS and the widget hooks) before
the host runs it against the repository.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from arc.content.repository import ContentRepository
from arc.core.models import Comment, ContentItem, PostStatus, PostType, Taxonomy, Term


class PostQuery(BaseModel):
    """Query for posts and pages."""

    post_type: PostType | None = PostType.POST  # None means any type
    status: PostStatus | None = PostStatus.PUBLISH

    post_id: str | None = None
    slug: str | None = None

    # Term archive: only posts filed under this term
    archive_term_id: str | None = None

    post_not_in: set[str] = Field(default_factory=set)
    term_not_in: set[str] = Field(default_factory=set)

    is_main_query: bool = False
    is_admin: bool = False

    limit: int = 10
    offset: int = 0

    @property
    def is_singular(self) -> bool:
        return self.post_id is not None or self.slug is not None

    @property
    def is_archive(self) -> bool:
        return self.archive_term_id is not None


class TermQuery(BaseModel):
    """Query for categories or tags."""

    taxonomy: Taxonomy = Taxonomy.CATEGORY
    exclude: set[str] = Field(default_factory=set)
    hide_empty: bool = False
    limit: int = 100


class CommentQuery(BaseModel):
    """Query for approved comments, newest first."""

    post_id: str | None = None
    post_not_in: set[str] = Field(default_factory=set)
    limit: int = 5


class QueryResult(BaseModel):
    """Posts returned by a query plus whether the request resolved at all."""

    items: list[ContentItem] = Field(default_factory=list)
    found: bool = True


async def run_post_query(repo: ContentRepository, query: PostQuery) -> QueryResult:
    """
    Execute a post query.

    Singular queries are "found" only if they return an item. Archive
    queries are "found" if the archive term exists and isn't excluded;
    an empty archive still renders.
    """
    if query.is_archive and query.archive_term_id in query.term_not_in:
        return QueryResult(found=False)

    posts = await repo.list_posts(query.post_type)

    items: list[ContentItem] = []
    for post in posts:
        if query.status is not None and post.status != query.status:
            continue
        if query.post_id is not None and post.id != query.post_id:
            continue
        if query.slug is not None and post.slug != query.slug:
            continue
        if query.archive_term_id is not None and query.archive_term_id not in post.term_ids:
            continue
        if post.id in query.post_not_in:
            continue
        items.append(post)

    if query.post_type == PostType.PAGE:
        items.sort(key=lambda p: (p.menu_order, p.title.lower()))
    else:
        items.sort(key=lambda p: p.created_at, reverse=True)

    items = items[query.offset:query.offset + query.limit]

    if query.is_singular:
        return QueryResult(items=items, found=bool(items))
    if query.is_archive:
        return QueryResult(items=items, found=await repo.get_term(query.archive_term_id) is not None)
    return QueryResult(items=items)


async def run_term_query(repo: ContentRepository, query: TermQuery) -> list[Term]:
    terms = [t for t in await repo.list_terms(query.taxonomy) if t.id not in query.exclude]
    if query.hide_empty:
        kept = []
        for term in terms:
            if await repo.count_term_posts(term.id) > 0:
                kept.append(term)
        terms = kept
    terms.sort(key=lambda t: t.name.lower())
    return terms[:query.limit]


async def run_comment_query(repo: ContentRepository, query: CommentQuery) -> list[Comment]:
    comments = [
        c for c in await repo.list_comments(query.post_id)
        if c.approved and c.post_id not in query.post_not_in
    ]
    comments.sort(key=lambda c: c.created_at, reverse=True)
    return comments[:query.limit]
