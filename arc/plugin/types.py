"""
Values passed through the plugin's hooks.

The host builds these, hands them to a filter, and renders or returns
whatever comes back.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


# =============================================================================
# Admin side
# =============================================================================


class ActionLink(BaseModel):
    """Link shown next to a plugin in the plugins list."""
    label: str
    url: str


class FormField(BaseModel):
    """A field an admin form should render."""
    name: str
    label: str
    type: Literal["checkbox", "text", "textarea", "hidden"] = "checkbox"
    value: Any = None
    description: str = ""


class MenuEntry(BaseModel):
    """An admin menu page."""
    slug: str
    title: str
    capability: str
    parent: str = "options-general"


class Notice(BaseModel):
    level: Literal["info", "success", "warning", "error"] = "info"
    message: str
    dismissible: bool = True


class Asset(BaseModel):
    """A script or stylesheet the page should load."""
    handle: str
    src: str
    kind: Literal["script", "style"]
    version: str = ""
    # Data exposed to the script as data-* attributes / a JSON blob
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Public side
# =============================================================================


class NotFoundContext(BaseModel):
    """What was requested when the host is about to answer 404."""
    path: str
    kind: Literal["single", "category", "tag"] = "single"
    slug: str


class LoginRedirect(BaseModel):
    """Answer the request with a redirect instead of a 404."""
    location: str
    status_code: int = 302


class LoginPageContext(BaseModel):
    reason: str | None = None
    redirect_to: str | None = None


class AjaxLoginAttempt(BaseModel):
    """Credentials posted by the inline login form."""
    username: str = ""
    password: str = ""
    remember: bool = False
    security: str = ""  # nonce
    redirect_to: str | None = None


class AjaxLoginResult(BaseModel):
    loggedin: bool
    message: str
    redirect_to: str | None = None

    # Set on success; the route turns it into a cookie and never echoes it
    session_token: str | None = Field(default=None, exclude=True)
    remember: bool = Field(default=False, exclude=True)


class RestResponse(BaseModel):
    """A REST payload about to be serialized."""
    status_code: int = 200
    data: Any = None
