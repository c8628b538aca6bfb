"""
Widget data as JSON, for themes that render widgets client-side.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from arc.api.deps import get_hooks, get_repo
from arc.auth.context import ViewerContext
from arc.auth.policies import get_viewer
from arc.content.repository import ContentRepository
from arc.core.hooks import HookDispatcher
from arc.site import widgets

router = APIRouter(prefix="/widgets", tags=["widgets"])


def _post_link(post) -> dict:
    return {"id": post.id, "title": post.title, "link": f"/{post.slug}"}


@router.get("/recent-posts")
async def recent_posts(
    limit: int = 5,
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    posts = await widgets.recent_posts(repo, hooks, viewer, limit=limit)
    return {"items": [_post_link(p) for p in posts]}


@router.get("/recent-comments")
async def recent_comments(
    limit: int = 5,
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    comments = await widgets.recent_comments(repo, hooks, viewer, limit=limit)
    return {"items": [
        {"id": c.id, "post": c.post_id, "author_name": c.author_name, "content": c.content}
        for c in comments
    ]}


@router.get("/pages")
async def pages(
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    return {"items": [_post_link(p) for p in await widgets.page_list(repo, hooks, viewer)]}


@router.get("/categories")
async def categories(
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    terms = await widgets.category_list(repo, hooks, viewer)
    return {"items": [{"id": t.id, "name": t.name, "link": f"/category/{t.slug}"} for t in terms]}


@router.get("/tags")
async def tags(
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    terms = await widgets.tag_cloud(repo, hooks, viewer)
    return {"items": [{"id": t.id, "name": t.name, "link": f"/tag/{t.slug}"} for t in terms]}
