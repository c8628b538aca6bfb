"""
Shared utility functions.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from urllib.parse import urlsplit


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "post", "term", "user")

    Returns:
        A unique ID like "post_a1b2c3d4e5f6"
    """
    uid = str(uuid.uuid4())[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated slug ("Members Only!" -> "members-only")."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "item"


def safe_local_path(target: str | None, default: str = "/") -> str:
    """
    Return `target` if it is a same-site path, otherwise `default`.

    Used for every redirect_to value that comes from a request so the login
    flow can't be turned into an open redirect.
    """
    if not target:
        return default
    # Browsers drop tabs and newlines and read "\" as "/", so "/\host" is protocol-relative too.
    normalized = re.sub(r"[\t\r\n]", "", target).replace("\\", "/")
    parts = urlsplit(normalized)
    if parts.scheme or parts.netloc or not normalized.startswith("/") or normalized.startswith("//"):
        return default
    return target
