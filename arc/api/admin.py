"""
Admin API - the data behind the admin screens, as JSON.

Each route builds the host's default value (columns, fields, actions...)
and passes it through the matching hook, so plugin additions show up
alongside the host's own.

Edit and create routes take form posts: a plugin field that is missing
from the submitted form means "unchecked" only when the form also
carries that plugin's marker field.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from arc import PLUGIN_NAME
from arc.api.deps import get_hooks, get_repo
from arc.auth.capabilities import Capability
from arc.auth.context import ViewerContext
from arc.auth.policies import require
from arc.content.repository import ContentRepository
from arc.core.hooks import Hook, HookDispatcher
from arc.core.models import ContentItem, PluginOptions, PostStatus, PostType, Taxonomy, Term
from arc.core.utils import slugify
from arc.plugin.options import load_options, save_options
from arc.plugin.types import ActionLink

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

BASE_POST_COLUMNS = {"title": "Title", "author": "Author", "date": "Date"}
BASE_TERM_COLUMNS = {"name": "Name", "slug": "Slug", "count": "Count"}
BASE_BULK_ACTIONS = {"trash": "Move to Trash"}


class BulkActionRequest(BaseModel):
    action: str
    ids: list[str]
    post_type: PostType = PostType.POST


def _edit_capability(post_type: PostType) -> Capability:
    return Capability.EDIT_PAGES if post_type == PostType.PAGE else Capability.EDIT_POSTS


def _check(viewer: ViewerContext, capability: Capability) -> None:
    if not viewer.can(capability):
        raise HTTPException(status_code=403, detail=f"Missing permissions: ['{capability.value}']")


def _term_list(value) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in str(value).split(",") if v.strip()]


def _form_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise HTTPException(
            status_code=422, detail=f"Invalid {field} '{value}'; expected one of: {allowed}"
        ) from None


async def _ensure_unique_post_slug(repo: ContentRepository, slug: str, post_id: str | None = None) -> None:
    # Posts and pages share the /{slug} namespace.
    existing = await repo.get_post_by_slug(slug)
    if existing is not None and existing.id != post_id:
        raise HTTPException(status_code=409, detail="An item with this slug already exists")


async def _ensure_unique_term_slug(
    repo: ContentRepository, taxonomy: Taxonomy, slug: str, term_id: str | None = None
) -> None:
    existing = await repo.get_term_by_slug(taxonomy, slug)
    if existing is not None and existing.id != term_id:
        raise HTTPException(status_code=409, detail="A term with this slug already exists")


# =============================================================================
# Plugins, menu, assets, notices
# =============================================================================


@router.get("/plugins")
async def list_plugins(
    viewer: ViewerContext = Depends(require(Capability.ACTIVATE_PLUGINS)),
    hooks: HookDispatcher = Depends(get_hooks),
):
    links = await hooks.apply_filters(
        Hook.PLUGIN_ACTION_LINKS, [ActionLink(label="Deactivate", url="/admin/plugins")], PLUGIN_NAME
    )
    return {"plugins": [{"name": PLUGIN_NAME, "actions": [link.model_dump() for link in links]}]}


@router.get("/menu")
async def admin_menu(
    viewer: ViewerContext = Depends(require()),
    hooks: HookDispatcher = Depends(get_hooks),
):
    entries = await hooks.apply_filters(Hook.ADMIN_MENU, [])
    visible = [e for e in entries if viewer.can(e.capability)]
    return {"items": [e.model_dump() for e in visible]}


@router.get("/assets")
async def admin_assets(
    viewer: ViewerContext = Depends(require()),
    hooks: HookDispatcher = Depends(get_hooks),
):
    assets = await hooks.apply_filters(Hook.ADMIN_ENQUEUE_SCRIPTS, [])
    return {"items": [a.model_dump() for a in assets]}


@router.get("/notices")
async def admin_notices(
    request: Request,
    viewer: ViewerContext = Depends(require()),
    hooks: HookDispatcher = Depends(get_hooks),
):
    notices = await hooks.apply_filters(Hook.ADMIN_NOTICES, [], dict(request.query_params))
    return {"items": [n.model_dump() for n in notices]}


# =============================================================================
# Posts and pages
# =============================================================================


@router.get("/posts")
async def list_posts(
    post_type: PostType = PostType.POST,
    viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    """Rows for the posts (or pages) list, with every column filled."""
    _check(viewer, _edit_capability(post_type))

    columns = await hooks.apply_filters(Hook.MANAGE_POSTS_COLUMNS, dict(BASE_POST_COLUMNS), post_type.value)
    actions = await hooks.apply_filters(Hook.BULK_ACTIONS, dict(BASE_BULK_ACTIONS), post_type.value)

    rows = []
    for post in await repo.list_posts(post_type):
        cells = {
            "title": post.title,
            "author": post.author_id or "",
            "date": post.created_at.isoformat(),
        }
        for column in columns:
            if column not in cells:
                cells[column] = await hooks.apply_filters(Hook.MANAGE_POSTS_CUSTOM_COLUMN, "", column, post.id)
        rows.append({"id": post.id, "status": post.status.value, "cells": cells})

    return {"columns": columns, "bulk_actions": actions, "rows": rows}


@router.post("/posts/bulk")
async def bulk_posts(
    body: BulkActionRequest,
    viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    _check(viewer, _edit_capability(body.post_type))

    # Every id must belong to the screen's post type; nothing changes otherwise.
    for post_id in body.ids:
        post = await repo.get_post(post_id)
        if post is None:
            raise HTTPException(status_code=404, detail=f"Post '{post_id}' not found")
        if post.post_type != body.post_type:
            raise HTTPException(
                status_code=403, detail=f"'{post_id}' is a {post.post_type.value}, not a {body.post_type.value}"
            )
        _check(viewer, _edit_capability(post.post_type))

    redirect_url = f"/admin/posts?post_type={body.post_type.value}"

    if body.action == "trash":
        for post_id in body.ids:
            await repo.delete_post(post_id)
        return {"redirect_to": redirect_url}

    redirect_url = await hooks.apply_filters(Hook.HANDLE_BULK_ACTIONS, redirect_url, body.action, body.ids)
    return {"redirect_to": redirect_url}


@router.post("/posts", status_code=201)
async def create_post(
    request: Request,
    viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    form = dict(await request.form())
    post_type = _form_enum(PostType, form.get("post_type", PostType.POST.value), "post_type")
    _check(viewer, _edit_capability(post_type))

    title = form.get("title", "").strip()
    if not title:
        raise HTTPException(status_code=422, detail="Title is required")
    status = _form_enum(PostStatus, form.get("status", PostStatus.PUBLISH.value), "status")
    slug = form.get("slug") or slugify(title)
    await _ensure_unique_post_slug(repo, slug)

    post = ContentItem(
        post_type=post_type,
        title=title,
        slug=slug,
        content=form.get("content", ""),
        excerpt=form.get("excerpt", ""),
        status=status,
        author_id=viewer.user_id,
        categories=_term_list(form.get("categories")),
        tags=_term_list(form.get("tags")),
    )
    await repo.save_post(post)
    await hooks.do_action(Hook.EDIT_POST, post.id, form)
    logger.info(f"{viewer.username} created {post_type.value} {post.id}")
    return await _post_json(repo, post.id)


@router.get("/posts/{post_id}/edit")
async def edit_post_form(
    post_id: str,
    viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    post = await repo.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    _check(viewer, _edit_capability(post.post_type))

    fields = await hooks.apply_filters(Hook.POST_SUBMITBOX_FIELDS, [], post)
    return {"post": post.model_dump(mode="json"), "submitbox": [f.model_dump() for f in fields]}


@router.post("/posts/{post_id}")
async def update_post(
    post_id: str,
    request: Request,
    viewer: ViewerContext = Depends(require(Capability.EDIT_POSTS)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    post = await repo.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    _check(viewer, _edit_capability(post.post_type))

    form = dict(await request.form())
    if "status" in form:
        post.status = _form_enum(PostStatus, form["status"], "status")
    if form.get("slug") and form["slug"] != post.slug:
        await _ensure_unique_post_slug(repo, form["slug"], post.id)
    for field in ("title", "slug", "content", "excerpt"):
        if field in form:
            setattr(post, field, form[field])
    if "categories" in form:
        post.categories = _term_list(form["categories"])
    if "tags" in form:
        post.tags = _term_list(form["tags"])
    post.touch()

    await repo.save_post(post)
    await hooks.do_action(Hook.EDIT_POST, post.id, form)
    return await _post_json(repo, post.id)


async def _post_json(repo: ContentRepository, post_id: str) -> dict:
    post = await repo.require_post(post_id)
    return post.model_dump(mode="json")


# =============================================================================
# Terms
# =============================================================================


@router.get("/terms")
async def list_terms(
    taxonomy: Taxonomy = Taxonomy.CATEGORY,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_CATEGORIES)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    columns = await hooks.apply_filters(Hook.MANAGE_TERMS_COLUMNS, dict(BASE_TERM_COLUMNS), taxonomy.value)

    rows = []
    for term in await repo.list_terms(taxonomy):
        cells = {"name": term.name, "slug": term.slug, "count": str(await repo.count_term_posts(term.id))}
        for column in columns:
            if column not in cells:
                cells[column] = await hooks.apply_filters(Hook.MANAGE_TERMS_CUSTOM_COLUMN, "", column, term.id)
        rows.append({"id": term.id, "cells": cells})

    return {"columns": columns, "rows": rows}


@router.get("/terms/new")
async def new_term_form(
    taxonomy: Taxonomy = Taxonomy.CATEGORY,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_CATEGORIES)),
    hooks: HookDispatcher = Depends(get_hooks),
):
    fields = await hooks.apply_filters(Hook.TERM_ADD_FORM_FIELDS, [], taxonomy)
    return {"taxonomy": taxonomy.value, "fields": [f.model_dump() for f in fields]}


@router.post("/terms", status_code=201)
async def create_term(
    request: Request,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_CATEGORIES)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    form = dict(await request.form())
    name = form.get("name", "").strip()
    if not name:
        raise HTTPException(status_code=422, detail="Name is required")

    taxonomy = _form_enum(Taxonomy, form.get("taxonomy", Taxonomy.CATEGORY.value), "taxonomy")
    slug = form.get("slug") or slugify(name)
    await _ensure_unique_term_slug(repo, taxonomy, slug)

    term = Term(
        taxonomy=taxonomy,
        name=name,
        slug=slug,
        description=form.get("description", ""),
        parent_id=form.get("parent_id") or None,
    )
    await repo.save_term(term)
    await hooks.do_action(Hook.CREATED_TERM, term.id, form)
    logger.info(f"{viewer.username} created {taxonomy.value} {term.id}")
    return (await repo.require_term(term.id)).model_dump(mode="json")


@router.get("/terms/{term_id}/edit")
async def edit_term_form(
    term_id: str,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_CATEGORIES)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    term = await repo.get_term(term_id)
    if term is None:
        raise HTTPException(status_code=404, detail="Term not found")
    fields = await hooks.apply_filters(Hook.TERM_EDIT_FORM_FIELDS, [], term)
    return {"term": term.model_dump(mode="json"), "fields": [f.model_dump() for f in fields]}


@router.post("/terms/{term_id}")
async def update_term(
    term_id: str,
    request: Request,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_CATEGORIES)),
    hooks: HookDispatcher = Depends(get_hooks),
    repo: ContentRepository = Depends(get_repo),
):
    term = await repo.get_term(term_id)
    if term is None:
        raise HTTPException(status_code=404, detail="Term not found")

    form = dict(await request.form())
    if form.get("slug") and form["slug"] != term.slug:
        await _ensure_unique_term_slug(repo, term.taxonomy, form["slug"], term.id)
    for field in ("name", "slug", "description"):
        if field in form:
            setattr(term, field, form[field])

    await repo.save_term(term)
    await hooks.do_action(Hook.EDITED_TERM, term.id, form)
    return (await repo.require_term(term.id)).model_dump(mode="json")


# =============================================================================
# Settings
# =============================================================================


@router.get("/settings")
async def get_plugin_settings(
    viewer: ViewerContext = Depends(require(Capability.MANAGE_OPTIONS)),
    repo: ContentRepository = Depends(get_repo),
):
    return (await load_options(repo)).model_dump()


@router.put("/settings")
async def update_plugin_settings(
    options: PluginOptions,
    viewer: ViewerContext = Depends(require(Capability.MANAGE_OPTIONS)),
    repo: ContentRepository = Depends(get_repo),
):
    saved = await save_options(repo, options)
    logger.info(f"{viewer.username} updated plugin settings")
    return saved.model_dump()
