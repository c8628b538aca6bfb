# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Create a Python project in Sentry
#   2. Copy its DSN to .env: ARC_SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   Called from the app lifespan (arc/api/app.py)
#
# =============================================================================

import logging

import sentry_sdk
from fastapi import HTTPException
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from arc.config import Settings, get_settings

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ("authorization", "cookie", "set-cookie", "x-api-key")
SENSITIVE_FIELDS = ("password", "pwd", "security")


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("ARC_SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,

        # Sample 10% of transactions in prod
        traces_sample_rate=0.1 if settings.is_production else 1.0,

        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],

        # Login forms carry credentials
        send_default_pii=False,

        before_send=_filter_events,
        before_send_transaction=_filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Filter out noisy or sensitive events."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]

        # Don't report 404s, auth failures, validation errors
        if isinstance(exc_value, HTTPException) and exc_value.status_code in (401, 403, 404, 422):
            return None

    request = event.get("request")
    if request:
        headers = request.get("headers") or {}
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[Filtered]"

        data = request.get("data")
        if isinstance(data, dict):
            for key in list(data.keys()):
                if key.lower() in SENSITIVE_FIELDS:
                    data[key] = "[Filtered]"

        # Session cookie may also arrive pre-parsed
        if "cookies" in request:
            request["cookies"] = "[Filtered]"

    return event


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Filter out noisy transactions."""
    transaction = event.get("transaction", "")

    if transaction in ("/health", "/healthz"):
        return None
    if transaction.startswith("/static"):
        return None

    return event
