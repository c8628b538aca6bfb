"""
Core module - data models and hook dispatch.

This module contains:
- models: Content items, terms, comments, plugin options
- hooks: Hook names, bindings and the dispatcher
- utils: Shared utility functions
"""

from arc.core.models import (
    ContentItem,
    Term,
    Comment,
    PostType,
    PostStatus,
    Taxonomy,
    PluginOptions,
)

from arc.core.hooks import (
    Hook,
    HookKind,
    Binding,
    HookDispatcher,
    HookError,
)

from arc.core.utils import (
    generate_id,
    utc_now,
    slugify,
    safe_local_path,
)

__all__ = [
    # Models
    "ContentItem",
    "Term",
    "Comment",
    "PostType",
    "PostStatus",
    "Taxonomy",
    "PluginOptions",
    # Hooks
    "Hook",
    "HookKind",
    "Binding",
    "HookDispatcher",
    "HookError",
    # Utils
    "generate_id",
    "utc_now",
    "slugify",
    "safe_local_path",
]
