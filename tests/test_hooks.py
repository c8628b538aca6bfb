"""
Tests for hook dispatch and the plugin's binding table.
"""

import pytest

from arc.core.hooks import Binding, Hook, HookDispatcher, HookError, HookKind
from arc.plugin.bootstrap import RestrictedContentPlugin


# =============================================================================
# Dispatcher
# =============================================================================


class TestHookDispatcher:
    """Ordered dispatch of actions and filters."""

    @pytest.mark.asyncio
    async def test_filters_run_by_priority_then_registration_order(self):
        calls = []

        def tagger(tag):
            async def handler(value):
                calls.append(tag)
                return value + [tag]
            return handler

        hooks = HookDispatcher()
        hooks.register([
            Binding(Hook.POST_CLASS, tagger("late"), priority=20),
            Binding(Hook.POST_CLASS, tagger("first")),
            Binding(Hook.POST_CLASS, tagger("second")),
            Binding(Hook.POST_CLASS, tagger("early"), priority=5),
        ])

        result = await hooks.apply_filters(Hook.POST_CLASS, [])

        assert result == ["early", "first", "second", "late"]
        assert calls == result

    @pytest.mark.asyncio
    async def test_filter_without_bindings_returns_value(self):
        hooks = HookDispatcher()
        assert await hooks.apply_filters(Hook.LOGIN_MESSAGE, "hello") == "hello"

    @pytest.mark.asyncio
    async def test_extra_args_are_passed_through(self):
        seen = {}

        async def handler(value, a, b):
            seen["args"] = (a, b)
            return value

        hooks = HookDispatcher()
        hooks.register([Binding(Hook.BULK_ACTIONS, handler)])
        await hooks.apply_filters(Hook.BULK_ACTIONS, {}, "post", "extra")

        assert seen["args"] == ("post", "extra")

    @pytest.mark.asyncio
    async def test_actions_run_every_handler(self):
        calls = []

        async def one(post_id, form):
            calls.append(("one", post_id))

        async def two(post_id, form):
            calls.append(("two", post_id))

        hooks = HookDispatcher()
        hooks.register([Binding(Hook.EDIT_POST, one), Binding(Hook.EDIT_POST, two)])
        await hooks.do_action(Hook.EDIT_POST, "p1", {})

        assert calls == [("one", "p1"), ("two", "p1")]

    @pytest.mark.asyncio
    async def test_kind_mismatch_raises(self):
        hooks = HookDispatcher()
        with pytest.raises(HookError):
            await hooks.do_action(Hook.POST_CLASS)
        with pytest.raises(HookError):
            await hooks.apply_filters(Hook.INIT, None)

    @pytest.mark.asyncio
    async def test_handler_errors_propagate(self):
        async def broken(value, viewer):
            raise RuntimeError("boom")

        hooks = HookDispatcher()
        hooks.register([Binding(Hook.PRE_GET_POSTS, broken)])

        with pytest.raises(RuntimeError, match="boom"):
            await hooks.apply_filters(Hook.PRE_GET_POSTS, None, None)

    def test_hook_kinds(self):
        assert Hook.INIT.kind == HookKind.ACTION
        assert Hook.EDITED_TERM.kind == HookKind.ACTION
        assert Hook.REST_PRE_ECHO_RESPONSE.kind == HookKind.FILTER


# =============================================================================
# Plugin bindings
# =============================================================================


class TestPluginBindings:
    """The plugin's explicit binding table."""

    def test_bindings_are_deterministic(self, plugin, repo, users, settings, access):
        again = RestrictedContentPlugin(repo, users, settings, access=access)
        assert [(b.hook, b.handler.__name__) for b in plugin.bindings] == [
            (b.hook, b.handler.__name__) for b in again.bindings
        ]

    def test_every_handler_is_a_bound_method(self, plugin):
        for binding in plugin.bindings:
            assert binding.handler.__self__ in (plugin.admin, plugin.public)

    def test_run_registers_everything(self, plugin):
        hooks = HookDispatcher()
        plugin.run(hooks)

        for binding in plugin.bindings:
            assert binding in hooks.bindings(binding.hook)

    def test_shared_handlers(self, plugin, dispatcher):
        posts = dispatcher.bindings(Hook.MANAGE_POSTS_COLUMNS)
        terms = dispatcher.bindings(Hook.MANAGE_TERMS_COLUMNS)
        assert posts[0].handler == terms[0].handler

        categories = dispatcher.bindings(Hook.WIDGET_CATEGORIES_ARGS)
        tags = dispatcher.bindings(Hook.WIDGET_TAG_CLOUD_ARGS)
        assert categories[0].handler == tags[0].handler

    def test_all_plugin_hooks_bound(self, dispatcher):
        for hook in (
            Hook.INIT,
            Hook.ADMIN_INIT,
            Hook.PRE_GET_POSTS,
            Hook.AJAX_NOPRIV_LOGIN,
            Hook.PRE_HANDLE_404,
            Hook.REST_PRE_ECHO_RESPONSE,
            Hook.EDIT_POST,
            Hook.CREATED_TERM,
            Hook.EDITED_TERM,
        ):
            assert dispatcher.has(hook), hook
