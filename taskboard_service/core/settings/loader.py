"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from taskboard_service.core.settings.loader import get_app_settings

    settings = get_app_settings()  # First call: loads and validates
    settings = get_app_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the caches to force reload:
    clear_settings_cache()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .logs import LoggingSettings
from .reminders import ReminderSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings.

    Returns:
        Validated and frozen DatabaseSettings instance.
    """
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings.

    Returns:
        Validated and frozen AuthSettings instance.
    """
    return AuthSettings()


@lru_cache(maxsize=1)
def get_reminder_settings() -> ReminderSettings:
    """Get cached reminder settings.

    Returns:
        Validated and frozen ReminderSettings instance.
    """
    return ReminderSettings()


def clear_settings_cache() -> None:
    """Clear every cached settings instance (useful for testing)."""
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_auth_settings.cache_clear()
    get_reminder_settings.cache_clear()
