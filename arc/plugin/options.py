"""
Plugin options stored in the host's option table.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from arc.content.repository import ContentRepository
from arc.core.models import PluginOptions

logger = logging.getLogger(__name__)

OPTIONS_NAME = "arc_options"


async def load_options(repo: ContentRepository) -> PluginOptions:
    """Current options; defaults if missing or unreadable."""
    raw = await repo.get_option(OPTIONS_NAME)
    if not raw:
        return PluginOptions()
    try:
        return PluginOptions.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Stored {OPTIONS_NAME} is invalid, using defaults: {e}")
        return PluginOptions()


async def save_options(repo: ContentRepository, options: PluginOptions) -> PluginOptions:
    await repo.update_option(OPTIONS_NAME, options.model_dump())
    return options
