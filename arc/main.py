"""
ARC demo site - main entry point.

    python -m arc.main
"""

from __future__ import annotations

import logging

import uvicorn

from arc.config import get_settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    uvicorn.run(
        "arc.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
