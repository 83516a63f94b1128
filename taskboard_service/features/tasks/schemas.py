"""Pydantic schemas for the tasks feature."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard_service.core.settings import get_reminder_settings
from taskboard_service.features.reminders.formatting import from_datetime_local
from taskboard_service.utils.timestamps import coerce_instant, to_utc

UNCATEGORIZED = "Uncategorized"


def _lenient_instant(value: Any) -> datetime | None:
    return coerce_instant(value)


def _wall_clock_instant(value: Any) -> datetime | None:
    """Request input: offset-less ``YYYY-MM-DDTHH:MM`` text is read in ``REMINDER_TIMEZONE``."""
    if isinstance(value, str):
        return from_datetime_local(value, get_reminder_settings().tz)
    return coerce_instant(value)


class CategoryRead(BaseModel):
    """Category reference attached to a task."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class TaskRead(BaseModel):
    """Task record as served to clients and held in view snapshots.

    Instances are immutable; a view session replaces a record wholesale
    whenever the store reports a newer version.
    """

    id: UUID
    title: str
    description: str = ""
    completed: bool = False
    deadline: datetime | None = None
    reminder: datetime | None = None
    category: CategoryRead | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("deadline", "reminder", mode="before")
    @classmethod
    def _coerce_optional_instant(cls, value: Any) -> datetime | None:
        return _lenient_instant(value)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_validator("description", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def category_name(self) -> str:
        """Category name, or ``Uncategorized`` when the task has none."""
        return self.category.name if self.category else UNCATEGORIZED


class TaskCreate(BaseModel):
    """Payload for creating a task.

    ``title`` is checked by the service (non-empty after trimming) so that a
    missing title is reported as a 400 with a single clear message.
    Unparseable ``deadline``/``reminder`` values are treated as absent;
    values without an offset are wall-clock times in the display timezone.
    """

    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(
        default=None,
        max_length=100,
        description="Category name; resolved or created for the current user",
    )
    deadline: datetime | None = None
    reminder: datetime | None = None

    @field_validator("deadline", "reminder", mode="before")
    @classmethod
    def _coerce_optional_instant(cls, value: Any) -> datetime | None:
        return _wall_clock_instant(value)


class TaskUpdate(TaskCreate):
    """Payload for a full edit; omitted fields are cleared."""

    completed: bool = False


class TaskPatch(BaseModel):
    """Partial update: only fields present in the request body change."""

    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(default=None, max_length=100)
    deadline: datetime | None = None
    reminder: datetime | None = None
    completed: bool | None = None

    @field_validator("deadline", "reminder", mode="before")
    @classmethod
    def _coerce_optional_instant(cls, value: Any) -> datetime | None:
        return _wall_clock_instant(value)


class TaskList(BaseModel):
    """All tasks of the current user, newest first."""

    items: list[TaskRead]
    total: int


class CategoryList(BaseModel):
    """Category names available to the current user, sorted."""

    items: list[str]
