"""
Route dependencies - objects built at startup and kept on app.state.
"""

from __future__ import annotations

from fastapi import Request

from arc.content.repository import ContentRepository
from arc.core.hooks import HookDispatcher


def get_repo(request: Request) -> ContentRepository:
    return request.app.state.repo


def get_hooks(request: Request) -> HookDispatcher:
    return request.app.state.hooks
