"""
Hook dispatch for the content site.

Hooks are the named extension points in the request lifecycle. Actions
notify handlers that something happened; filters thread a value through
every handler and return the result.

Plugins don't register themselves. They expose an ordered list of
`Binding` values which the application hands to `HookDispatcher.register`
once at startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)

# Type for hook handlers. Filters return the (possibly changed) value,
# actions return None.
HookHandler = Callable[..., Awaitable[Any]]

DEFAULT_PRIORITY = 10


class HookError(Exception):
    """Raised when a hook is used in a way that doesn't match its kind."""
    pass


class HookKind(str, Enum):
    ACTION = "action"
    FILTER = "filter"


class Hook(str, Enum):
    """Every extension point the host fires."""

    # Lifecycle
    INIT = "init"
    ADMIN_INIT = "admin_init"

    # Public side
    ENQUEUE_SCRIPTS = "enqueue_scripts"
    PRE_GET_POSTS = "pre_get_posts"
    BODY_OPEN = "body_open"
    AJAX_NOPRIV_LOGIN = "ajax_nopriv_login"
    LOGIN_MESSAGE = "login_message"
    PRE_HANDLE_404 = "pre_handle_404"
    WIDGET_POSTS_ARGS = "widget_posts_args"
    WIDGET_COMMENTS_ARGS = "widget_comments_args"
    LIST_PAGES_EXCLUDES = "list_pages_excludes"
    WIDGET_CATEGORIES_ARGS = "widget_categories_args"
    WIDGET_TAG_CLOUD_ARGS = "widget_tag_cloud_args"
    POST_CLASS = "post_class"
    REST_PRE_ECHO_RESPONSE = "rest_pre_echo_response"

    # Admin side
    ADMIN_MENU = "admin_menu"
    ADMIN_NOTICES = "admin_notices"
    ADMIN_ENQUEUE_SCRIPTS = "admin_enqueue_scripts"
    PLUGIN_ACTION_LINKS = "plugin_action_links"
    BULK_ACTIONS = "bulk_actions"
    HANDLE_BULK_ACTIONS = "handle_bulk_actions"
    MANAGE_POSTS_COLUMNS = "manage_posts_columns"
    MANAGE_POSTS_CUSTOM_COLUMN = "manage_posts_custom_column"
    MANAGE_TERMS_COLUMNS = "manage_terms_columns"
    MANAGE_TERMS_CUSTOM_COLUMN = "manage_terms_custom_column"
    POST_SUBMITBOX_FIELDS = "post_submitbox_fields"
    TERM_ADD_FORM_FIELDS = "term_add_form_fields"
    TERM_EDIT_FORM_FIELDS = "term_edit_form_fields"
    EDIT_POST = "edit_post"
    CREATED_TERM = "created_term"
    EDITED_TERM = "edited_term"

    @property
    def kind(self) -> HookKind:
        return HookKind.ACTION if self in _ACTIONS else HookKind.FILTER


_ACTIONS = frozenset({
    Hook.INIT,
    Hook.ADMIN_INIT,
    Hook.EDIT_POST,
    Hook.CREATED_TERM,
    Hook.EDITED_TERM,
})


@dataclass(frozen=True)
class Binding:
    """One handler bound to one hook."""

    hook: Hook
    handler: HookHandler
    priority: int = DEFAULT_PRIORITY

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


class HookDispatcher:
    """
    Ordered dispatch of actions and filters.

    Handlers run in ascending priority; bindings with equal priority run in
    the order they were registered. Handler exceptions are logged and
    re-raised: a broken access filter must fail the request, not let
    restricted content through.
    """

    def __init__(self):
        self._bindings: dict[Hook, list[tuple[int, int, Binding]]] = {}
        self._sequence = 0

    def register(self, bindings: Iterable[Binding]) -> None:
        """Add bindings, keeping each hook's list sorted."""
        for binding in bindings:
            entries = self._bindings.setdefault(binding.hook, [])
            entries.append((binding.priority, self._sequence, binding))
            entries.sort(key=lambda e: (e[0], e[1]))
            self._sequence += 1
            logger.debug(f"Bound {binding.name} to {binding.hook.value} (priority {binding.priority})")

    def bindings(self, hook: Hook) -> list[Binding]:
        """Bindings for a hook, in dispatch order."""
        return [entry[2] for entry in self._bindings.get(hook, [])]

    def has(self, hook: Hook) -> bool:
        return bool(self._bindings.get(hook))

    async def do_action(self, hook: Hook, *args: Any) -> None:
        """Run every handler bound to an action hook."""
        if hook.kind != HookKind.ACTION:
            raise HookError(f"'{hook.value}' is a filter; use apply_filters()")

        for binding in self.bindings(hook):
            try:
                await binding.handler(*args)
            except Exception:
                logger.exception(f"Action handler {binding.name} failed on {hook.value}")
                raise

    async def apply_filters(self, hook: Hook, value: Any, *args: Any) -> Any:
        """Pass `value` through every handler bound to a filter hook."""
        if hook.kind != HookKind.FILTER:
            raise HookError(f"'{hook.value}' is an action; use do_action()")

        for binding in self.bindings(hook):
            try:
                value = await binding.handler(value, *args)
            except Exception:
                logger.exception(f"Filter handler {binding.name} failed on {hook.value}")
                raise
        return value
