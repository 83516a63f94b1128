"""Domain events for the tasks feature.

Published to the change feed after a mutation commits. Consumers only get
the task id and re-read the record, so events never carry stale field values.
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar
from uuid import UUID

from pydantic import Field

from taskboard_service.core.events import DomainEvent


class ChangeOperation(StrEnum):
    """Kind of change a task event describes."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class TaskChangedEvent(DomainEvent):
    """Common shape of every task change."""

    event_type: ClassVar[str] = "task.changed"
    operation: ClassVar[ChangeOperation] = ChangeOperation.UPDATE

    task_id: UUID = Field(description="Id of the task that changed")
    user_id: str = Field(description="Owner of the task")


class TaskCreatedEvent(TaskChangedEvent):
    """Published when a new task is created."""

    event_type: ClassVar[str] = "task.created"
    operation: ClassVar[ChangeOperation] = ChangeOperation.INSERT


class TaskUpdatedEvent(TaskChangedEvent):
    """Published when a task is edited or its completion toggled."""

    event_type: ClassVar[str] = "task.updated"
    operation: ClassVar[ChangeOperation] = ChangeOperation.UPDATE

    changes: list[str] = Field(default_factory=list, description="Names of the fields that changed")


class TaskDeletedEvent(TaskChangedEvent):
    """Published when a task is deleted."""

    event_type: ClassVar[str] = "task.deleted"
    operation: ClassVar[ChangeOperation] = ChangeOperation.DELETE
