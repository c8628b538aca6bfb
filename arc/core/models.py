"""
Core data models for the content site.

These are the entities the host stores and the plugin reads: content
items (posts and pages), taxonomy terms, comments and the plugin's options.
Restriction is not a field on any of them; it lives in `meta` so the host
stays unaware of it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from arc.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class PostType(str, Enum):
    """Kinds of content item."""

    POST = "post"
    PAGE = "page"


class PostStatus(str, Enum):
    """Publication status of a content item."""

    PUBLISH = "publish"
    DRAFT = "draft"


class Taxonomy(str, Enum):
    """Taxonomies a term can belong to."""

    CATEGORY = "category"
    TAG = "post_tag"


# =============================================================================
# Content Item
# =============================================================================


class ContentItem(BaseModel):
    """
    A post or a page.

    Categories and tags are stored as lists of term IDs. Only posts carry
    terms; pages use `parent_id` and `menu_order` instead.
    """

    id: str = Field(default_factory=lambda: generate_id("post"))
    post_type: PostType = PostType.POST

    title: str
    slug: str
    content: str = ""
    excerpt: str = ""
    status: PostStatus = PostStatus.PUBLISH

    author_id: str | None = None
    parent_id: str | None = None
    menu_order: int = 0

    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    # Arbitrary key -> value metadata (plugins store their flags here)
    meta: dict[str, Any] = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def term_ids(self) -> list[str]:
        return [*self.categories, *self.tags]

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISH

    def touch(self) -> None:
        self.updated_at = utc_now()


# =============================================================================
# Term
# =============================================================================


class Term(BaseModel):
    """A category or a tag."""

    id: str = Field(default_factory=lambda: generate_id("term"))
    taxonomy: Taxonomy
    name: str
    slug: str
    description: str = ""
    parent_id: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Comment
# =============================================================================


class Comment(BaseModel):
    """A reader comment attached to a content item."""

    id: str = Field(default_factory=lambda: generate_id("cmt"))
    post_id: str
    author_name: str
    content: str
    approved: bool = True
    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Plugin Options
# =============================================================================


DEFAULT_LOGIN_MESSAGE = (
    "This content is available to registered users only. "
    "Please log in to continue."
)


class PluginOptions(BaseModel):
    """Settings page values for the restricted content plugin."""

    login_message: str = DEFAULT_LOGIN_MESSAGE

    # Send anonymous visitors of a restricted URL to the login page
    # instead of showing a 404
    redirect_to_login: bool = True

    # Inject the inline login form into public pages
    ajax_login: bool = True
