"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/logging/auth/reminders), each with its
own environment prefix, and loaded through LRU-cached loaders:

    from taskboard_service.core.settings import get_reminder_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file (development only)
"""

from __future__ import annotations

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_auth_settings,
    get_db_settings,
    get_logging_settings,
    get_reminder_settings,
)
from .logs import LoggingSettings
from .reminders import ReminderSettings

__all__ = [
    "AppSettings",
    "AuthSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "ReminderSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_auth_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_reminder_settings",
]
