"""
Admin side of the restricted content plugin.

Columns, checkboxes, bulk actions, settings and notices. The host renders
whatever these handlers return; saving happens in the edit/term actions.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from arc.access.store import RESTRICTED_META_KEY, AccessPolicyStore, is_restricted, parse_restricted
from arc.content.repository import POST_OBJECT, TERM_OBJECT, ContentRepository, MetaSpec, NotFoundError
from arc.core.models import ContentItem, PluginOptions, Taxonomy, Term
from arc.plugin.options import OPTIONS_NAME
from arc.plugin.types import ActionLink, Asset, FormField, MenuEntry, Notice

logger = logging.getLogger(__name__)

COLUMN = "arc_restricted"
FIELD = "arc_restricted"
# Present on every form that renders the checkbox, so a missing checkbox
# means "unchecked" rather than "not on this form"
FIELD_MARKER = "arc_restricted_present"

BULK_RESTRICT = "arc_restrict"
BULK_UNRESTRICT = "arc_unrestrict"
BULK_RESULT_PARAM = "arc_bulk"
BULK_COUNT_PARAM = "arc_count"

SETTINGS_SLUG = "arc-settings"
SETTINGS_URL = "/admin/settings"


class RestrictedContentAdmin:
    """Handlers for the admin area."""

    def __init__(
        self,
        plugin_name: str,
        version: str,
        repo: ContentRepository,
        access: AccessPolicyStore,
    ):
        self.plugin_name = plugin_name
        self.version = version
        self.repo = repo
        self.access = access

    # =========================================================================
    # Plugin list, menu, assets
    # =========================================================================

    async def add_action_links(self, links: list[ActionLink], plugin_name: str) -> list[ActionLink]:
        if plugin_name != self.plugin_name:
            return links
        return [ActionLink(label="Settings", url=SETTINGS_URL), *links]

    async def register_plugin_admin_menu(self, menu: list[MenuEntry]) -> list[MenuEntry]:
        return [*menu, MenuEntry(
            slug=SETTINGS_SLUG,
            title="Anonymous Restricted Content",
            capability="manage_options",
        )]

    async def enqueue_styles(self, assets: list[Asset]) -> list[Asset]:
        return [*assets, Asset(
            handle=f"{self.plugin_name}-admin",
            src="/static/arc/arc-admin.css",
            kind="style",
            version=self.version,
        )]

    # =========================================================================
    # Registration (init / admin_init)
    # =========================================================================

    async def register_plugin_settings(self) -> None:
        if await self.repo.add_option(OPTIONS_NAME, PluginOptions().model_dump()):
            logger.info(f"Created default {OPTIONS_NAME}")

    async def register_gutenberg_meta(self) -> None:
        """Expose the flag to the block editor / REST clients."""
        entry = MetaSpec(
            key=RESTRICTED_META_KEY,
            type="boolean",
            default=False,
            description="Visible to logged-in users only",
            show_in_rest=True,
        )
        self.repo.register_meta(POST_OBJECT, entry)
        self.repo.register_meta(TERM_OBJECT, entry)

    # =========================================================================
    # List columns
    # =========================================================================

    async def posts_list_restricted_column(self, columns: dict[str, str], screen: str) -> dict[str, str]:
        """Used for the posts, pages, categories and tags lists alike."""
        return {**columns, COLUMN: "Restricted"}

    async def fill_restricted_column(self, cell: str, column: str, post_id: str) -> str:
        if column != COLUMN:
            return cell
        return "Yes" if await self.access.is_post_restricted(post_id) else "No"

    async def fill_category_restricted_column(self, cell: str, column: str, term_id: str) -> str:
        if column != COLUMN:
            return cell
        return "Yes" if await self.access.is_term_restricted(term_id) else "No"

    # =========================================================================
    # Bulk actions
    # =========================================================================

    async def register_posts_bulk_actions(self, actions: dict[str, str], post_type: str) -> dict[str, str]:
        return {
            **actions,
            BULK_RESTRICT: "Restrict for anonymous users",
            BULK_UNRESTRICT: "Remove restriction",
        }

    async def handle_posts_bulk_actions(self, redirect_url: str, action: str, post_ids: list[str]) -> str:
        """Flip the flag on every selected item; report the count in the redirect URL."""
        if action not in (BULK_RESTRICT, BULK_UNRESTRICT):
            return redirect_url

        restricted = action == BULK_RESTRICT
        count = 0
        for post_id in post_ids:
            try:
                await self.access.set_post_restricted(post_id, restricted)
            except NotFoundError:
                logger.warning(f"Bulk {action}: post {post_id} not found, skipped")
                continue
            count += 1

        result = "restricted" if restricted else "unrestricted"
        return _with_query(redirect_url, {BULK_RESULT_PARAM: result, BULK_COUNT_PARAM: str(count)})

    async def arc_admin_notices(self, notices: list[Notice], params: Mapping[str, str]) -> list[Notice]:
        result = params.get(BULK_RESULT_PARAM)
        if result not in ("restricted", "unrestricted"):
            return notices
        try:
            count = int(params.get(BULK_COUNT_PARAM, "0"))
        except ValueError:
            return notices

        noun = "item" if count == 1 else "items"
        if result == "restricted":
            message = f"{count} {noun} restricted for anonymous users."
        else:
            message = f"{count} {noun} no longer restricted."
        return [*notices, Notice(level="success", message=message)]

    # =========================================================================
    # Edit screens
    # =========================================================================

    async def add_restricted_checkbox_to_post_submitbox(
        self, fields: list[FormField], post: ContentItem
    ) -> list[FormField]:
        return [*fields, *_checkbox(is_restricted(post))]

    async def add_restricted_checkbox_to_add_category_addtag(
        self, fields: list[FormField], taxonomy: Taxonomy
    ) -> list[FormField]:
        return [*fields, *_checkbox(False)]

    async def add_restricted_checkbox_to_edit_category_addtag(
        self, fields: list[FormField], term: Term
    ) -> list[FormField]:
        return [*fields, *_checkbox(is_restricted(term))]

    async def save_restricted_option_on_post_edit(self, post_id: str, form: Mapping[str, Any]) -> None:
        if FIELD_MARKER not in form:
            return
        await self.access.set_post_restricted(post_id, parse_restricted(form.get(FIELD)))

    async def save_restricted_option_on_category(self, term_id: str, form: Mapping[str, Any]) -> None:
        if FIELD_MARKER not in form:
            return
        await self.access.set_term_restricted(term_id, parse_restricted(form.get(FIELD)))


def _checkbox(checked: bool) -> list[FormField]:
    return [
        FormField(
            name=FIELD,
            label="Restricted",
            type="checkbox",
            value=checked,
            description="Only logged-in users can see this.",
        ),
        FormField(name=FIELD_MARKER, label="", type="hidden", value="1"),
    ]


def _with_query(url: str, params: dict[str, str]) -> str:
    """Replace our result params in `url`, keeping everything else."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k not in params]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
