"""Reminder and task view settings."""

from __future__ import annotations

from datetime import timedelta
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NotifierBackend = Literal["logging", "null"]
PermissionSetting = Literal["granted", "denied", "default"]


class ReminderSettings(BaseSettings):
    """Cadences and windows for the reminder engine.

    Environment variables use REMINDER_ prefix.
    Example: REMINDER_TICK_SECONDS=10, REMINDER_TIMEZONE=Europe/Paris

    The suppression window (how long a fired reminder stays in the ledger)
    and the upcoming window (the amber bell indicator) are independent.
    """

    tick_seconds: float = Field(
        default=10.0,
        gt=0,
        le=3600,
        description="Reminder evaluation cadence in seconds",
    )
    view_tick_seconds: float = Field(
        default=60.0,
        gt=0,
        le=3600,
        description="Task table refresh cadence in seconds",
    )
    suppression_minutes: int = Field(
        default=60,
        ge=1,
        le=10080,
        description="Minutes after a reminder instant during which its ledger entry is kept",
    )
    upcoming_minutes: int = Field(
        default=60,
        ge=1,
        le=10080,
        description="Minutes ahead within which a pending reminder lights the upcoming indicator",
    )
    preview_limit: int = Field(
        default=3,
        ge=0,
        le=50,
        description="Upcoming reminders listed in an empty notification dropdown",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used for calendar-date decisions and display text",
    )
    notifier: NotifierBackend = Field(
        default="logging",
        description="Desktop notification mirror: logging|null",
    )
    notifier_permission: PermissionSetting = Field(
        default="default",
        description="Permission the logging notifier grants when asked (granted|denied|default)",
    )
    feed_queue_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Buffered change events per subscriber before the oldest is dropped",
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"Unknown timezone: {value}"
            raise ValueError(msg) from exc
        return value

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def tz(self) -> ZoneInfo:
        """Display timezone."""
        return ZoneInfo(self.timezone)

    @property
    def suppression_window(self) -> timedelta:
        return timedelta(minutes=self.suppression_minutes)

    @property
    def upcoming_window(self) -> timedelta:
        return timedelta(minutes=self.upcoming_minutes)
