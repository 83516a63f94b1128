"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskboard_service.core.settings import get_app_settings
from taskboard_service.features.health.router import router as health_router
from taskboard_service.features.metrics.router import router as metrics_router
from taskboard_service.features.reminders.router import router as reminders_router
from taskboard_service.features.tasks.router import router as tasks_router
from taskboard_service.features.taskview.router import router as taskview_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from taskboard_service.core.settings import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API prefix.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # No prefix: /health and /metrics
    app.include_router(health_router)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)

    # /tasks/view must be matched before /tasks/{task_id}
    app.include_router(taskview_router, prefix=api_prefix)
    app.include_router(tasks_router, prefix=api_prefix)
    app.include_router(reminders_router, prefix=api_prefix)

    logger.info("Routers registered", extra={"api_prefix": api_prefix})
