"""
Public site routes (HTML) and the inline login endpoint.

Routes:
    GET  /                 - latest posts (main query)
    GET  /login            - login page
    POST /login            - classic login form
    GET  /logout           - end the session
    POST /ajax/login       - inline AJAX login
    GET  /category/{slug}  - category archive
    GET  /tag/{slug}       - tag archive
    GET  /{slug}           - single post or page

Every 404 is offered to PRE_HANDLE_404 first, which may turn it into a
redirect to the login page.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from arc.auth.context import ViewerContext
from arc.auth.policies import get_viewer
from arc.auth.sessions import clear_session_cookie, issue_session, revoke_session, set_session_cookie
from arc.auth.users import AuthenticationError
from arc.api.deps import get_hooks, get_repo
from arc.content.query import PostQuery, run_post_query
from arc.content.repository import ContentRepository
from arc.core.hooks import Hook, HookDispatcher
from arc.core.models import ContentItem, Taxonomy
from arc.core.utils import safe_local_path
from arc.plugin.types import AjaxLoginAttempt, LoginPageContext, NotFoundContext
from arc.site.render import render_article, render_login, render_page
from arc.site.widgets import build_sidebar

logger = logging.getLogger(__name__)

router = APIRouter(tags=["site"])


# =============================================================================
# Helpers
# =============================================================================


def _request_path(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


async def _page(
    request: Request,
    viewer: ViewerContext,
    title: str,
    content: str,
    status_code: int = 200,
) -> HTMLResponse:
    state = request.app.state
    hooks: HookDispatcher = state.hooks
    assets = await hooks.apply_filters(Hook.ENQUEUE_SCRIPTS, [], viewer)
    body_open = await hooks.apply_filters(Hook.BODY_OPEN, [], viewer, _request_path(request))
    sidebar = await build_sidebar(state.repo, hooks, viewer)
    html = render_page(state.settings.site_name, title, content, viewer, assets, body_open, sidebar)
    return HTMLResponse(html, status_code=status_code)


async def _articles(
    hooks: HookDispatcher, viewer: ViewerContext, posts: list[ContentItem], full: bool = False
) -> str:
    parts = []
    for post in posts:
        classes = [post.post_type.value, f"type-{post.post_type.value}", f"post-{post.id}"]
        classes = await hooks.apply_filters(Hook.POST_CLASS, classes, post, viewer)
        parts.append(render_article(post, classes, full=full))
    return "\n".join(parts)


async def _not_found(request: Request, viewer: ViewerContext, kind: str, slug: str):
    hooks: HookDispatcher = request.app.state.hooks
    ctx = NotFoundContext(path=_request_path(request), kind=kind, slug=slug)
    redirect = await hooks.apply_filters(Hook.PRE_HANDLE_404, None, ctx, viewer)
    if redirect is not None:
        return RedirectResponse(redirect.location, status_code=redirect.status_code)
    return await _page(request, viewer, "Page not found", "<p>Nothing was found at this location.</p>", 404)


async def _main_query(hooks: HookDispatcher, repo: ContentRepository, viewer: ViewerContext, **fields):
    query = await hooks.apply_filters(Hook.PRE_GET_POSTS, PostQuery(is_main_query=True, **fields), viewer)
    return await run_post_query(repo, query)


# =============================================================================
# Home
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    result = await _main_query(hooks, repo, viewer)
    content = await _articles(hooks, viewer, result.items) or "<p>No posts yet.</p>"
    return await _page(request, viewer, "Home", content)


# =============================================================================
# Login / logout
# =============================================================================


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    redirect_to: str | None = None,
    reason: str | None = None,
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
):
    target = safe_local_path(redirect_to)
    if viewer.is_authenticated:
        return RedirectResponse(target, status_code=302)

    message = await hooks.apply_filters(
        Hook.LOGIN_MESSAGE, "", LoginPageContext(reason=reason, redirect_to=redirect_to)
    )
    settings = request.app.state.settings
    return await _page(request, viewer, "Log In", render_login(settings.login_path, target, message))


@router.post("/login")
async def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    remember: bool = Form(False),
    redirect_to: str = Form("/"),
    viewer: ViewerContext = Depends(get_viewer),
):
    state = request.app.state
    settings = state.settings
    target = safe_local_path(redirect_to)

    try:
        user = await state.users.authenticate(username, password)
    except AuthenticationError as e:
        message = await state.hooks.apply_filters(Hook.LOGIN_MESSAGE, "", LoginPageContext(redirect_to=target))
        return await _page(request, viewer, "Log In", render_login(settings.login_path, target, message, str(e)))

    response = RedirectResponse(target, status_code=303)
    set_session_cookie(response, issue_session(user.id, remember, settings), remember, settings)
    logger.info(f"Login for {user.username}")
    return response


@router.get("/logout")
async def logout(request: Request, viewer: ViewerContext = Depends(get_viewer)):
    state = request.app.state
    await revoke_session(viewer, state.storage, state.settings)
    response = RedirectResponse("/", status_code=302)
    clear_session_cookie(response, state.settings)
    return response


@router.post("/ajax/login")
async def ajax_login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    remember: bool = Form(False),
    security: str = Form(""),
    redirect_to: str | None = Form(None),
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
):
    """Inline login. Always answers JSON; never redirects."""
    if viewer.is_authenticated:
        raise HTTPException(status_code=400, detail="Already logged in")

    attempt = AjaxLoginAttempt(
        username=username,
        password=password,
        remember=remember,
        security=security,
        redirect_to=redirect_to,
    )
    result = await hooks.apply_filters(Hook.AJAX_NOPRIV_LOGIN, None, attempt)
    if result is None:
        raise HTTPException(status_code=400, detail="No handler for this action")

    response = JSONResponse(result.model_dump())
    if result.session_token:
        set_session_cookie(response, result.session_token, result.remember, request.app.state.settings)
    return response


# =============================================================================
# Archives
# =============================================================================


async def _archive(request: Request, viewer: ViewerContext, taxonomy: Taxonomy, slug: str):
    state = request.app.state
    kind = "category" if taxonomy == Taxonomy.CATEGORY else "tag"

    term = await state.repo.get_term_by_slug(taxonomy, slug)
    if term is None:
        return await _not_found(request, viewer, kind, slug)

    result = await _main_query(state.hooks, state.repo, viewer, archive_term_id=term.id)
    if not result.found:
        return await _not_found(request, viewer, kind, slug)

    content = await _articles(state.hooks, viewer, result.items) or "<p>No posts in this archive.</p>"
    return await _page(request, viewer, term.name, content)


@router.get("/category/{slug}", response_class=HTMLResponse)
async def category_archive(request: Request, slug: str, viewer: ViewerContext = Depends(get_viewer)):
    return await _archive(request, viewer, Taxonomy.CATEGORY, slug)


@router.get("/tag/{slug}", response_class=HTMLResponse)
async def tag_archive(request: Request, slug: str, viewer: ViewerContext = Depends(get_viewer)):
    return await _archive(request, viewer, Taxonomy.TAG, slug)


# =============================================================================
# Single post / page (keep last: matches any single path segment)
# =============================================================================


@router.get("/{slug}", response_class=HTMLResponse)
async def single(
    request: Request,
    slug: str,
    viewer: ViewerContext = Depends(get_viewer),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    result = await _main_query(hooks, repo, viewer, post_type=None, slug=slug, limit=1)
    if not result.found:
        return await _not_found(request, viewer, "single", slug)

    post = result.items[0]
    return await _page(request, viewer, post.title, await _articles(hooks, viewer, [post], full=True))
