"""
Public-facing side of the restricted content plugin.

Every handler here is bound to a host hook by `RestrictedContentPlugin`.
Filters receive the value being filtered first and the viewer (or other
request context) after it, and return the new value. Nothing here runs
for logged-in viewers except the post class marker.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

from arc.access.store import AccessPolicyStore, is_restricted
from arc.auth.context import ViewerContext
from arc.auth.jwt import create_nonce, verify_nonce
from arc.auth.sessions import issue_session
from arc.auth.users import AuthenticationError, UserStore
from arc.config import Settings
from arc.content.query import CommentQuery, PostQuery, TermQuery
from arc.content.repository import ContentRepository
from arc.core.models import ContentItem, PostStatus, PostType, Taxonomy
from arc.core.utils import safe_local_path
from arc.plugin.login_form import render_login_form, render_login_message
from arc.plugin.options import load_options
from arc.plugin.types import (
    AjaxLoginAttempt,
    AjaxLoginResult,
    Asset,
    LoginPageContext,
    LoginRedirect,
    NotFoundContext,
    RestResponse,
)

logger = logging.getLogger(__name__)

AJAX_LOGIN_ACTION = "arc-ajax-login"
RESTRICTED_REASON = "restricted"
RESTRICTED_POST_CLASS = "arc-restricted"

_POST_TYPES = {t.value for t in PostType}

Q = TypeVar("Q", PostQuery, CommentQuery)


class RestrictedContentPublic:
    """Handlers for the public side of the site."""

    def __init__(
        self,
        plugin_name: str,
        version: str,
        repo: ContentRepository,
        access: AccessPolicyStore,
        users: UserStore,
        settings: Settings,
    ):
        self.plugin_name = plugin_name
        self.version = version
        self.repo = repo
        self.access = access
        self.users = users
        self.settings = settings

    # =========================================================================
    # Assets
    # =========================================================================

    async def enqueue_styles(self, assets: list[Asset], viewer: ViewerContext) -> list[Asset]:
        return [*assets, Asset(
            handle=self.plugin_name,
            src="/static/arc/arc-public.css",
            kind="style",
            version=self.version,
        )]

    async def enqueue_scripts(self, assets: list[Asset], viewer: ViewerContext) -> list[Asset]:
        if viewer.is_authenticated:
            return assets
        return [*assets, Asset(
            handle=self.plugin_name,
            src="/static/arc/arc-public.js",
            kind="script",
            version=self.version,
            data={"ajax_url": self.settings.ajax_login_path},
        )]

    # =========================================================================
    # Queries
    # =========================================================================

    async def hide_restricted_in_main_query(self, query: PostQuery, viewer: ViewerContext) -> PostQuery:
        """Drop restricted items (and restricted term archives) from the main query."""
        if viewer.is_authenticated or query.is_admin or not query.is_main_query:
            return query

        hidden_posts = await self.access.restricted_post_ids(query.post_type)
        hidden_terms = await self.access.restricted_term_ids()
        return query.model_copy(update={
            "post_not_in": query.post_not_in | hidden_posts,
            "term_not_in": query.term_not_in | hidden_terms,
        })

    async def hide_restricted_posts_in_query(self, query: Q, viewer: ViewerContext) -> Q:
        """Recent posts and recent comments widgets."""
        if viewer.is_authenticated:
            return query
        hidden = await self.access.restricted_post_ids()
        return query.model_copy(update={"post_not_in": query.post_not_in | hidden})

    async def hide_restricted_pages_in_list(self, excludes: list[str], viewer: ViewerContext) -> list[str]:
        """Page list widget and navigation."""
        if viewer.is_authenticated:
            return excludes
        hidden = await self.access.restricted_post_ids(PostType.PAGE)
        return [*excludes, *sorted(hidden - set(excludes))]

    async def hide_restricted_categories_in_list(self, query: TermQuery, viewer: ViewerContext) -> TermQuery:
        """Category and tag cloud widgets."""
        if viewer.is_authenticated:
            return query
        hidden = await self.access.restricted_term_ids(query.taxonomy)
        return query.model_copy(update={"exclude": query.exclude | hidden})

    # =========================================================================
    # Rendering
    # =========================================================================

    async def add_post_class(self, classes: list[str], post: ContentItem, viewer: ViewerContext) -> list[str]:
        if is_restricted(post) and RESTRICTED_POST_CLASS not in classes:
            return [*classes, RESTRICTED_POST_CLASS]
        return classes

    async def ajax_login_data(self, fragments: list[str], viewer: ViewerContext, request_path: str) -> list[str]:
        """Inject the hidden inline login form for anonymous visitors."""
        if viewer.is_authenticated:
            return fragments

        options = await load_options(self.repo)
        if not options.ajax_login:
            return fragments

        form = render_login_form(
            ajax_url=self.settings.ajax_login_path,
            nonce=create_nonce(AJAX_LOGIN_ACTION, self.settings),
            redirect_to=request_path,
            login_url=f"{self.settings.login_path}?redirect_to={quote(request_path)}",
        )
        return [*fragments, form]

    async def restricted_login_message(self, message: str, ctx: LoginPageContext) -> str:
        if ctx.reason != RESTRICTED_REASON:
            return message
        options = await load_options(self.repo)
        return message + render_login_message(options.login_message)

    # =========================================================================
    # Routing
    # =========================================================================

    async def redirect_restricted_content_to_login(
        self,
        redirect: LoginRedirect | None,
        ctx: NotFoundContext,
        viewer: ViewerContext,
    ) -> LoginRedirect | None:
        """Send anonymous visitors of a restricted URL to the login page."""
        if redirect is not None or viewer.is_authenticated:
            return redirect

        options = await load_options(self.repo)
        if not options.redirect_to_login:
            return None

        if ctx.kind == "single":
            post = await self.repo.get_post_by_slug(ctx.slug, status=PostStatus.PUBLISH)
            restricted = post is not None and is_restricted(post)
        else:
            taxonomy = Taxonomy.CATEGORY if ctx.kind == "category" else Taxonomy.TAG
            term = await self.repo.get_term_by_slug(taxonomy, ctx.slug)
            restricted = term is not None and is_restricted(term)

        if not restricted:
            return None

        logger.info(f"Redirecting anonymous request for {ctx.path} to login")
        query = urlencode({"redirect_to": ctx.path, "reason": RESTRICTED_REASON})
        return LoginRedirect(location=f"{self.settings.login_path}?{query}")

    # =========================================================================
    # Inline login
    # =========================================================================

    async def ajax_do_login(self, result: AjaxLoginResult | None, attempt: AjaxLoginAttempt) -> AjaxLoginResult:
        """Check the nonce, then let the host authenticate the credentials."""
        if result is not None:
            return result

        if not verify_nonce(attempt.security, AJAX_LOGIN_ACTION, self.settings):
            return AjaxLoginResult(
                loggedin=False,
                message="Security check failed. Please reload the page and try again.",
            )

        try:
            user = await self.users.authenticate(attempt.username, attempt.password)
        except AuthenticationError as e:
            return AjaxLoginResult(loggedin=False, message=str(e))

        logger.info(f"Inline login for {user.username}")
        return AjaxLoginResult(
            loggedin=True,
            message="Login successful.",
            redirect_to=safe_local_path(attempt.redirect_to),
            session_token=issue_session(user.id, attempt.remember, self.settings),
            remember=attempt.remember,
        )

    # =========================================================================
    # REST API
    # =========================================================================

    async def restricted_rest_api(self, response: RestResponse, viewer: ViewerContext) -> RestResponse:
        """
        Strip restricted entries from an outgoing REST payload.

        Posts, pages and terms are recognised at any depth (lists, `_embedded`
        blocks), as are comments on restricted posts. A restricted single
        object at the top level turns into a 401 error.
        """
        if viewer.is_authenticated:
            return response

        hidden_posts = await self.access.restricted_post_ids()
        hidden_terms = await self.access.restricted_term_ids()

        # Term counts must not reveal how many restricted posts a term holds.
        hidden_counts: dict[str, int] = {}
        for post_id in hidden_posts:
            post = await self.repo.get_post(post_id)
            if post is None or post.post_type != PostType.POST or not post.is_published:
                continue
            for term_id in post.term_ids:
                hidden_counts[term_id] = hidden_counts.get(term_id, 0) + 1

        def is_hidden(node: dict[str, Any]) -> bool:
            if node.get("type") in _POST_TYPES:
                return node.get("id") in hidden_posts
            if "taxonomy" in node:
                return node.get("id") in hidden_terms
            if node.get("type") == "comment":
                return node.get("post") in hidden_posts
            return False

        def strip(node: Any) -> Any:
            if isinstance(node, list):
                return [strip(x) for x in node if not (isinstance(x, dict) and is_hidden(x))]
            if isinstance(node, dict):
                cleaned = {k: strip(v) for k, v in node.items()}
                if node.get("type") == PostType.POST.value:
                    for key in ("categories", "tags"):
                        if isinstance(cleaned.get(key), list):
                            cleaned[key] = [t for t in cleaned[key] if t not in hidden_terms]
                if "taxonomy" in node and isinstance(node.get("count"), int):
                    cleaned["count"] = max(0, node["count"] - hidden_counts.get(node.get("id"), 0))
                return cleaned
            return node

        if isinstance(response.data, dict) and is_hidden(response.data):
            options = await load_options(self.repo)
            return RestResponse(status_code=401, data={
                "code": "arc_restricted",
                "message": options.login_message,
                "data": {"status": 401},
            })

        return response.model_copy(update={"data": strip(response.data)})
