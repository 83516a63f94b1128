"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from taskboard_service.app.middleware.metrics import MetricsMiddleware
from taskboard_service.app.middleware.request_id import RequestIDMiddleware
from taskboard_service.core.settings import get_app_settings

if TYPE_CHECKING:
    from fastapi import FastAPI

    from taskboard_service.core.settings import AppSettings

logger = logging.getLogger(__name__)


def configure_middleware(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Configure middleware for the application.

    Middleware added last runs first: RequestID wraps Metrics wraps CORS.

    Args:
        app: FastAPI application instance.
        app_settings: Optional settings override.
    """
    app_settings = app_settings or get_app_settings()

    if app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=app_settings.cors_allow_credentials,
            allow_methods=app_settings.cors_allow_methods,
            allow_headers=app_settings.cors_allow_headers,
            max_age=3600,
        )
        logger.info("CORS configured", extra={"origins": app_settings.cors_origins})

    if app_settings.metrics_enabled:
        app.add_middleware(MetricsMiddleware)

    app.add_middleware(RequestIDMiddleware)


__all__ = ["MetricsMiddleware", "RequestIDMiddleware", "configure_middleware"]
