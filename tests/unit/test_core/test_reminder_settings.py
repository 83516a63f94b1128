"""Unit tests for settings validation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from taskboard_service.core.settings import AuthSettings, ReminderSettings


def test_reminder_defaults():
    settings = ReminderSettings(_env_file=None, tick_seconds=10, view_tick_seconds=60)

    assert settings.suppression_window == timedelta(hours=1)
    assert settings.upcoming_window == timedelta(hours=1)
    assert settings.preview_limit == 3


def test_windows_are_independent():
    settings = ReminderSettings(suppression_minutes=30, upcoming_minutes=120)

    assert settings.suppression_window == timedelta(minutes=30)
    assert settings.upcoming_window == timedelta(hours=2)


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        ReminderSettings(timezone="Mars/Olympus_Mons")


def test_tick_must_be_positive():
    with pytest.raises(ValidationError):
        ReminderSettings(tick_seconds=0)


def test_http_backend_requires_service_url():
    with pytest.raises(ValidationError):
        AuthSettings(backend="http", service_url=None)
