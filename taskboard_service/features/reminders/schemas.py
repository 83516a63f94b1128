"""Pydantic schemas for the reminders feature."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from taskboard_service.features.reminders.notifications import ReminderNotification


class UpcomingReminder(BaseModel):
    """Preview line for a pending task with a reminder."""

    task_id: UUID
    title: str
    reminder: datetime
    deadline: datetime | None = None
    time_left: str = Field(description="Countdown text, e.g. '25min until reminder'")
    reminder_label: str
    deadline_label: str | None = None


class BellState(BaseModel):
    """Everything the reminder bell renders.

    ``show_badge`` (unread notifications) and ``has_upcoming`` (a pending
    reminder inside the upcoming window) are independent signals.
    """

    unread_count: int
    show_badge: bool
    has_upcoming: bool
    notifications: list[ReminderNotification]
    upcoming: list[UpcomingReminder] = Field(
        default_factory=list,
        description="Soonest pending reminders, shown while the dropdown is empty",
    )
    current_time: datetime


class SessionInfo(BaseModel):
    """State of the caller's mounted view session."""

    user_id: str
    mounts: int
    task_count: int
    ledger_size: int
    notification_permission: str
    live_updates: bool = Field(description="Whether the session receives change feed events")
    bell: BellState


class ClearResult(BaseModel):
    removed: int


class ClientMessageType(StrEnum):
    """Message types sent from a WebSocket client."""

    PING = "ping"
    BELL = "bell"
    OPEN = "open"
    DISMISS = "dismiss"
    CLEAR = "clear"
    TABLE = "table"
    SORT = "sort"
    FILTERS = "filters"
    TOGGLE_CATEGORY = "toggle_category"


class ServerMessageType(StrEnum):
    """Message types pushed to a WebSocket client."""

    CONNECTED = "connected"
    PONG = "pong"
    BELL = "bell"
    TABLE = "table"
    ERROR = "error"


class ServerMessage(BaseModel):
    """Frame without a payload, e.g. ``pong``."""

    type: ServerMessageType


class PushMessage(ServerMessage):
    """Frame carrying state: ``connected``, ``bell`` or ``table``."""

    data: dict[str, Any] = Field(default_factory=dict)


class ErrorMessage(ServerMessage):
    type: Literal[ServerMessageType.ERROR] = ServerMessageType.ERROR
    code: str
    message: str
