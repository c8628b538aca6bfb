"""
The restricted content plugin - admin handlers, public handlers and the
bootstrap that binds them to host hooks.
"""

from arc.plugin.bootstrap import RestrictedContentPlugin
from arc.plugin.admin import RestrictedContentAdmin
from arc.plugin.public import RestrictedContentPublic
from arc.plugin.options import OPTIONS_NAME, load_options, save_options

__all__ = [
    "RestrictedContentPlugin",
    "RestrictedContentAdmin",
    "RestrictedContentPublic",
    "OPTIONS_NAME",
    "load_options",
    "save_options",
]
