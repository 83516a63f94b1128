"""Application lifespan management.

Startup Order:
1. Core (logging)
2. Database
3. Change feed
4. Reminder session manager (requires database and change feed)

Shutdown Order: Reverse of startup (what starts first, shuts down last)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from taskboard_service.core.dependencies import close_identity_provider
from taskboard_service.core.settings import (
    get_app_settings,
    get_auth_settings,
    get_db_settings,
    get_logging_settings,
    get_reminder_settings,
)
from taskboard_service.features.reminders.manager import start_reminder_manager, stop_reminder_manager
from taskboard_service.features.tasks.source import DatabaseTaskSource
from taskboard_service.infra.logging import setup_logging
from taskboard_service.infra.logging import shutdown as shutdown_logging
from taskboard_service.infra.realtime import get_change_feed, start_change_feed, stop_change_feed

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


# =============================================================================
# Startup functions
# =============================================================================


async def _startup_core() -> None:
    app = get_app_settings()
    setup_logging(get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment, "version": app.version},
    )


async def _startup_database() -> None:
    from taskboard_service.infra.database.session import init_database

    db = get_db_settings()
    try:
        await init_database()
    except Exception as e:
        logger.exception(
            "Database unavailable, failing startup",
            extra={"error": str(e), "is_sqlite": db.is_sqlite},
        )
        raise
    logger.info("Database connection initialized", extra={"is_sqlite": db.is_sqlite})


async def _startup_realtime() -> None:
    settings = get_reminder_settings()
    start_change_feed(queue_size=settings.feed_queue_size)


async def _startup_reminders() -> None:
    from taskboard_service.infra.database.session import AsyncSessionLocal

    settings = get_reminder_settings()
    start_reminder_manager(DatabaseTaskSource(AsyncSessionLocal), get_change_feed(), settings)


# =============================================================================
# Shutdown functions
# =============================================================================


async def _shutdown_reminders() -> None:
    try:
        await stop_reminder_manager()
    except Exception as e:
        logger.warning("Error stopping reminder sessions", extra={"error": str(e)})


async def _shutdown_database() -> None:
    from taskboard_service.infra.database.session import close_database

    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection", extra={"error": str(e)})


# =============================================================================
# Main lifespan context manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    _ = app

    await _startup_core()
    await _startup_database()
    await _startup_realtime()
    await _startup_reminders()

    app_settings = get_app_settings()
    reminder_settings = get_reminder_settings()
    logger.info(
        "Application startup complete - listening on %s:%s",
        app_settings.host,
        app_settings.port,
        extra={
            "service": app_settings.service_name,
            "api_prefix": app_settings.api_prefix,
            "identity_backend": get_auth_settings().backend,
            "reminder_tick_seconds": reminder_settings.tick_seconds,
            "timezone": reminder_settings.timezone,
        },
    )

    yield

    logger.info("Application shutting down")
    await _shutdown_reminders()
    stop_change_feed()
    await close_identity_provider()
    await _shutdown_database()
    logger.info("Application shutdown complete")
    shutdown_logging()
