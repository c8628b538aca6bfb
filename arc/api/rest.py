"""
REST API for content.

Shapes follow the familiar blog REST layout (`title.rendered`,
`_embedded["wp:term"]`, ...). Every response body goes through
REST_PRE_ECHO_RESPONSE before it is serialized, so plugins see exactly
what the client would.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from arc.api.deps import get_repo
from arc.auth.context import ViewerContext
from arc.auth.policies import get_viewer
from arc.content.query import CommentQuery, PostQuery, TermQuery, run_comment_query, run_post_query, run_term_query
from arc.content.repository import POST_OBJECT, TERM_OBJECT, ContentRepository
from arc.core.hooks import Hook
from arc.core.models import Comment, ContentItem, PostType, Taxonomy, Term
from arc.plugin.types import RestResponse

router = APIRouter(prefix="/api", tags=["rest"])


# =============================================================================
# Serialization
# =============================================================================


async def serialize_term(term: Term, repo: ContentRepository) -> dict[str, Any]:
    prefix = "category" if term.taxonomy == Taxonomy.CATEGORY else "tag"
    return {
        "id": term.id,
        "taxonomy": term.taxonomy.value,
        "name": term.name,
        "slug": term.slug,
        "description": term.description,
        "parent": term.parent_id,
        "count": await repo.count_term_posts(term.id),
        "link": f"/{prefix}/{term.slug}",
        "meta": repo.rest_meta(TERM_OBJECT, term.meta),
    }


async def serialize_post(post: ContentItem, repo: ContentRepository, embed: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": post.id,
        "type": post.post_type.value,
        "slug": post.slug,
        "status": post.status.value,
        "link": f"/{post.slug}",
        "date": post.created_at.isoformat(),
        "modified": post.updated_at.isoformat(),
        "author": post.author_id,
        "title": {"rendered": post.title},
        "content": {"rendered": post.content},
        "excerpt": {"rendered": post.excerpt},
        "meta": repo.rest_meta(POST_OBJECT, post.meta),
    }
    if post.post_type == PostType.PAGE:
        data["parent"] = post.parent_id
        data["menu_order"] = post.menu_order
    else:
        data["categories"] = list(post.categories)
        data["tags"] = list(post.tags)

    if embed and post.post_type == PostType.POST:
        groups = []
        for ids in (post.categories, post.tags):
            group = []
            for term_id in ids:
                term = await repo.get_term(term_id)
                if term is not None:
                    group.append(await serialize_term(term, repo))
            groups.append(group)
        data["_embedded"] = {"wp:term": groups}
    return data


def serialize_comment(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "type": "comment",
        "post": comment.post_id,
        "author_name": comment.author_name,
        "date": comment.created_at.isoformat(),
        "content": {"rendered": comment.content},
    }


def _error(code: str, message: str, status: int) -> RestResponse:
    return RestResponse(status_code=status, data={"code": code, "message": message, "data": {"status": status}})


async def respond(request: Request, viewer: ViewerContext, response: RestResponse) -> JSONResponse:
    response = await request.app.state.hooks.apply_filters(Hook.REST_PRE_ECHO_RESPONSE, response, viewer)
    return JSONResponse(response.data, status_code=response.status_code)


# =============================================================================
# Posts and pages
# =============================================================================


async def _list(request, viewer, repo, post_type: PostType, page: int, per_page: int, embed: bool):
    per_page = max(1, min(per_page, 100))
    query = PostQuery(post_type=post_type, limit=per_page, offset=(max(page, 1) - 1) * per_page)
    result = await run_post_query(repo, query)
    data = [await serialize_post(p, repo, embed) for p in result.items]
    return await respond(request, viewer, RestResponse(data=data))


async def _single(request, viewer, repo, post_type: PostType, post_id: str, embed: bool):
    post = await repo.get_post(post_id)
    if post is None or post.post_type != post_type or not post.is_published:
        return await respond(request, viewer, _error("rest_post_invalid_id", "Invalid post ID.", 404))
    return await respond(request, viewer, RestResponse(data=await serialize_post(post, repo, embed)))


@router.get("/posts")
async def list_posts(
    request: Request,
    page: int = 1,
    per_page: int = 10,
    embed: bool = Query(False, alias="_embed"),
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _list(request, viewer, repo, PostType.POST, page, per_page, embed)


@router.get("/posts/{post_id}")
async def get_post(
    request: Request,
    post_id: str,
    embed: bool = Query(False, alias="_embed"),
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _single(request, viewer, repo, PostType.POST, post_id, embed)


@router.get("/pages")
async def list_pages(
    request: Request,
    page: int = 1,
    per_page: int = 10,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _list(request, viewer, repo, PostType.PAGE, page, per_page, False)


@router.get("/pages/{post_id}")
async def get_page(
    request: Request,
    post_id: str,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _single(request, viewer, repo, PostType.PAGE, post_id, False)


# =============================================================================
# Terms
# =============================================================================


async def _terms(request, viewer, repo, taxonomy: Taxonomy, hide_empty: bool):
    terms = await run_term_query(repo, TermQuery(taxonomy=taxonomy, hide_empty=hide_empty))
    data = [await serialize_term(t, repo) for t in terms]
    return await respond(request, viewer, RestResponse(data=data))


async def _term(request, viewer, repo, taxonomy: Taxonomy, term_id: str):
    term = await repo.get_term(term_id)
    if term is None or term.taxonomy != taxonomy:
        return await respond(request, viewer, _error("rest_term_invalid", "Term does not exist.", 404))
    return await respond(request, viewer, RestResponse(data=await serialize_term(term, repo)))


@router.get("/categories")
async def list_categories(
    request: Request,
    hide_empty: bool = False,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _terms(request, viewer, repo, Taxonomy.CATEGORY, hide_empty)


@router.get("/categories/{term_id}")
async def get_category(
    request: Request,
    term_id: str,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _term(request, viewer, repo, Taxonomy.CATEGORY, term_id)


@router.get("/tags")
async def list_tags(
    request: Request,
    hide_empty: bool = False,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _terms(request, viewer, repo, Taxonomy.TAG, hide_empty)


@router.get("/tags/{term_id}")
async def get_tag(
    request: Request,
    term_id: str,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    return await _term(request, viewer, repo, Taxonomy.TAG, term_id)


# =============================================================================
# Comments
# =============================================================================


@router.get("/comments")
async def list_comments(
    request: Request,
    post: str | None = None,
    per_page: int = 10,
    viewer: ViewerContext = Depends(get_viewer),
    repo: ContentRepository = Depends(get_repo),
):
    comments = await run_comment_query(repo, CommentQuery(post_id=post, limit=max(1, min(per_page, 100))))
    return await respond(request, viewer, RestResponse(data=[serialize_comment(c) for c in comments]))
