"""
Roles and capabilities.

This defines WHAT users can do, not HOW we check it.
The actual checking happens in policies.py.
"""

from enum import Enum


class Role(str, Enum):
    """Site-wide role of a user."""

    ADMINISTRATOR = "administrator"  # Everything, including settings
    EDITOR = "editor"                # Manage all content and terms
    AUTHOR = "author"                # Write and edit posts
    SUBSCRIBER = "subscriber"        # Read restricted content only


class Capability(str, Enum):
    """
    Fine-grained capabilities.

    These are the actual permissions checked by policies.
    """

    READ = "read"
    EDIT_POSTS = "edit_posts"
    EDIT_PAGES = "edit_pages"
    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_OPTIONS = "manage_options"
    ACTIVATE_PLUGINS = "activate_plugins"


# What capabilities each role grants
ROLE_CAPABILITIES: dict[Role, set[Capability]] = {
    Role.ADMINISTRATOR: set(Capability),
    Role.EDITOR: {
        Capability.READ,
        Capability.EDIT_POSTS,
        Capability.EDIT_PAGES,
        Capability.MANAGE_CATEGORIES,
    },
    Role.AUTHOR: {
        Capability.READ,
        Capability.EDIT_POSTS,
    },
    Role.SUBSCRIBER: {
        Capability.READ,
    },
}


def get_capabilities(role: Role | None) -> set[Capability]:
    """Capabilities for a role (none for anonymous viewers)."""
    if role is None:
        return set()
    return set(ROLE_CAPABILITIES.get(role, set()))
