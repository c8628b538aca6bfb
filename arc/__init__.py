"""
Anonymous Restricted Content.

A small content site with a plugin that hides restricted posts, pages,
categories and tags from anonymous visitors and offers them an inline
AJAX login form instead.
"""

__version__ = "1.0.0"

PLUGIN_NAME = "anonymous-restricted-content"
