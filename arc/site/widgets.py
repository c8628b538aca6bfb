"""
Sidebar widgets.

Each widget builds a default query, lets plugins narrow it through its
hook, and runs it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from arc.auth.context import ViewerContext
from arc.content.query import (
    CommentQuery,
    PostQuery,
    TermQuery,
    run_comment_query,
    run_post_query,
    run_term_query,
)
from arc.content.repository import ContentRepository
from arc.core.hooks import Hook, HookDispatcher
from arc.core.models import Comment, ContentItem, PostType, Taxonomy, Term


async def recent_posts(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext, limit: int = 5
) -> list[ContentItem]:
    query = await hooks.apply_filters(Hook.WIDGET_POSTS_ARGS, PostQuery(limit=limit), viewer)
    return (await run_post_query(repo, query)).items


async def recent_comments(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext, limit: int = 5
) -> list[Comment]:
    query = await hooks.apply_filters(Hook.WIDGET_COMMENTS_ARGS, CommentQuery(limit=limit), viewer)
    return await run_comment_query(repo, query)


async def page_list(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext
) -> list[ContentItem]:
    excludes = await hooks.apply_filters(Hook.LIST_PAGES_EXCLUDES, [], viewer)
    query = PostQuery(post_type=PostType.PAGE, post_not_in=set(excludes), limit=100)
    return (await run_post_query(repo, query)).items


async def category_list(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext
) -> list[Term]:
    query = await hooks.apply_filters(
        Hook.WIDGET_CATEGORIES_ARGS, TermQuery(taxonomy=Taxonomy.CATEGORY), viewer
    )
    return await run_term_query(repo, query)


async def tag_cloud(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext
) -> list[Term]:
    query = await hooks.apply_filters(
        Hook.WIDGET_TAG_CLOUD_ARGS, TermQuery(taxonomy=Taxonomy.TAG, limit=45), viewer
    )
    return await run_term_query(repo, query)


@dataclass
class Sidebar:
    pages: list[ContentItem] = field(default_factory=list)
    posts: list[ContentItem] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    categories: list[Term] = field(default_factory=list)
    tags: list[Term] = field(default_factory=list)


async def build_sidebar(
    repo: ContentRepository, hooks: HookDispatcher, viewer: ViewerContext
) -> Sidebar:
    return Sidebar(
        pages=await page_list(repo, hooks, viewer),
        posts=await recent_posts(repo, hooks, viewer),
        comments=await recent_comments(repo, hooks, viewer),
        categories=await category_list(repo, hooks, viewer),
        tags=await tag_cloud(repo, hooks, viewer),
    )
