"""
The restricted content plugin.

Builds the admin and public handler objects and the complete, ordered
list of hook bindings. Nothing is registered until `run()` hands the
bindings to a dispatcher.
"""

from __future__ import annotations

import logging

from arc import PLUGIN_NAME, __version__
from arc.access.store import AccessPolicyStore
from arc.auth.users import UserStore
from arc.config import Settings
from arc.content.repository import ContentRepository
from arc.core.hooks import Binding, Hook, HookDispatcher
from arc.plugin.admin import RestrictedContentAdmin
from arc.plugin.public import RestrictedContentPublic

logger = logging.getLogger(__name__)


class RestrictedContentPlugin:
    """
    Wires the plugin's handlers to host hooks.

    Usage:
        plugin = RestrictedContentPlugin(repo, users, settings)
        plugin.run(dispatcher)
    """

    def __init__(
        self,
        repo: ContentRepository,
        users: UserStore,
        settings: Settings,
        access: AccessPolicyStore | None = None,
        plugin_name: str = PLUGIN_NAME,
        version: str = __version__,
    ):
        self.plugin_name = plugin_name
        self.version = version
        self.access = access or AccessPolicyStore(repo)

        self.admin = RestrictedContentAdmin(plugin_name, version, repo, self.access)
        self.public = RestrictedContentPublic(plugin_name, version, repo, self.access, users, settings)

        self._bindings = (*self._admin_bindings(), *self._public_bindings())

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return self._bindings

    def run(self, dispatcher: HookDispatcher) -> None:
        """Register every binding with the host."""
        dispatcher.register(self._bindings)
        logger.info(f"{self.plugin_name} {self.version}: {len(self._bindings)} hook bindings registered")

    def _admin_bindings(self) -> list[Binding]:
        admin = self.admin
        return [
            Binding(Hook.PLUGIN_ACTION_LINKS, admin.add_action_links),

            Binding(Hook.BULK_ACTIONS, admin.register_posts_bulk_actions),
            Binding(Hook.HANDLE_BULK_ACTIONS, admin.handle_posts_bulk_actions),

            Binding(Hook.MANAGE_POSTS_COLUMNS, admin.posts_list_restricted_column),
            Binding(Hook.MANAGE_POSTS_CUSTOM_COLUMN, admin.fill_restricted_column),
            Binding(Hook.MANAGE_TERMS_COLUMNS, admin.posts_list_restricted_column),
            Binding(Hook.MANAGE_TERMS_CUSTOM_COLUMN, admin.fill_category_restricted_column),

            Binding(Hook.ADMIN_ENQUEUE_SCRIPTS, admin.enqueue_styles),

            # Checkbox on edit screens, saved with the post / term
            Binding(Hook.POST_SUBMITBOX_FIELDS, admin.add_restricted_checkbox_to_post_submitbox),
            Binding(Hook.EDIT_POST, admin.save_restricted_option_on_post_edit),
            Binding(Hook.TERM_ADD_FORM_FIELDS, admin.add_restricted_checkbox_to_add_category_addtag),
            Binding(Hook.TERM_EDIT_FORM_FIELDS, admin.add_restricted_checkbox_to_edit_category_addtag),
            Binding(Hook.CREATED_TERM, admin.save_restricted_option_on_category),
            Binding(Hook.EDITED_TERM, admin.save_restricted_option_on_category),

            Binding(Hook.ADMIN_INIT, admin.register_plugin_settings),
            Binding(Hook.ADMIN_MENU, admin.register_plugin_admin_menu),
            Binding(Hook.INIT, admin.register_gutenberg_meta),
            Binding(Hook.ADMIN_NOTICES, admin.arc_admin_notices),
        ]

    def _public_bindings(self) -> list[Binding]:
        public = self.public
        return [
            Binding(Hook.ENQUEUE_SCRIPTS, public.enqueue_scripts),
            Binding(Hook.ENQUEUE_SCRIPTS, public.enqueue_styles),

            Binding(Hook.PRE_GET_POSTS, public.hide_restricted_in_main_query),
            Binding(Hook.BODY_OPEN, public.ajax_login_data),
            Binding(Hook.AJAX_NOPRIV_LOGIN, public.ajax_do_login),

            Binding(Hook.LOGIN_MESSAGE, public.restricted_login_message),
            Binding(Hook.PRE_HANDLE_404, public.redirect_restricted_content_to_login),
            Binding(Hook.WIDGET_COMMENTS_ARGS, public.hide_restricted_posts_in_query),
            Binding(Hook.WIDGET_POSTS_ARGS, public.hide_restricted_posts_in_query),
            Binding(Hook.LIST_PAGES_EXCLUDES, public.hide_restricted_pages_in_list),
            Binding(Hook.WIDGET_CATEGORIES_ARGS, public.hide_restricted_categories_in_list),
            Binding(Hook.WIDGET_TAG_CLOUD_ARGS, public.hide_restricted_categories_in_list),

            Binding(Hook.POST_CLASS, public.add_post_class),

            Binding(Hook.REST_PRE_ECHO_RESPONSE, public.restricted_rest_api),
        ]
