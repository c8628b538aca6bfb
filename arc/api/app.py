"""
FastAPI application for the ARC demo site.

A small content site (posts, pages, categories, tags, comments) with the
anonymous restricted content plugin wired into its hooks.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from arc import __version__
from arc.access.store import AccessPolicyStore
from arc.api import admin, rest, site, widgets
from arc.auth import UserStore, auth_router
from arc.config import Settings, get_settings
from arc.config_loader import load_site
from arc.content.repository import ContentRepository
from arc.core.hooks import Hook, HookDispatcher
from arc.integrations.sentry import init_sentry
from arc.plugin.bootstrap import RestrictedContentPlugin
from arc.storage import StorageProvider, create_local_storage

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the site and run the startup actions."""
    state = app.state
    settings: Settings = state.settings

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    seed = Path(settings.site_seed_path) if settings.site_seed_path else None
    if seed is not None and seed.exists():
        await load_site(seed, state.repo, state.users, state.access)
    elif seed is not None:
        logger.warning(f"Site seed {seed} not found, starting empty")

    await state.hooks.do_action(Hook.INIT)
    await state.hooks.do_action(Hook.ADMIN_INIT)

    logger.info(f"{settings.site_name} starting in {settings.environment} mode")

    yield

    logger.info(f"{settings.site_name} shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(settings: Settings | None = None, storage: StorageProvider | None = None) -> FastAPI:
    """
    Build the application.

    Stores, the hook dispatcher and the plugin live on `app.state`; routes
    reach them through `arc.api.deps`.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="ARC Demo Site",
        description="Content site with posts and pages restricted to logged-in users",
        version=__version__,
        lifespan=lifespan,
    )

    state = app.state
    state.settings = settings
    state.storage = storage or create_local_storage()
    state.repo = ContentRepository(state.storage)
    state.access = AccessPolicyStore(state.repo)
    state.users = UserStore(state.storage)
    state.hooks = HookDispatcher()
    state.plugin = RestrictedContentPlugin(state.repo, state.users, settings, access=state.access)
    state.plugin.run(state.hooks)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(rest.router)
    app.include_router(widgets.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": __version__}

    app.mount("/static/arc", StaticFiles(directory=STATIC_DIR), name="arc-static")

    # Catch-all `/{slug}` lives here, so it goes last
    app.include_router(site.router)

    return app


app = create_app()
