"""Task table sorting."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from taskboard_service.features.tasks.schemas import TaskRead


class SortColumn(StrEnum):
    TITLE = "title"
    DESCRIPTION = "description"
    CATEGORY = "category"
    DEADLINE = "deadline"
    REMINDER = "reminder"
    COMPLETED = "completed"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SortState(BaseModel):
    """Selected sort column and direction; newest tasks first by default."""

    column: SortColumn = SortColumn.CREATED_AT
    direction: SortDirection = SortDirection.DESC

    model_config = ConfigDict(frozen=True)

    def toggled(self, column: SortColumn | str) -> SortState:
        """State after clicking ``column``'s header.

        Clicking the current column while ascending flips to descending;
        anything else sorts ascending.
        """
        column = SortColumn(column)
        if column is self.column and self.direction is SortDirection.ASC:
            return SortState(column=column, direction=SortDirection.DESC)
        return SortState(column=column, direction=SortDirection.ASC)


def sort_value(task: TaskRead, column: SortColumn) -> str | None:
    """Comparable text for ``column``, or None when the value is absent."""
    if column is SortColumn.CATEGORY:
        value: object = task.category_name
    else:
        value = getattr(task, column.value)
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.astimezone(UTC).isoformat()
    return str(value).lower()


def sort_tasks(tasks: Iterable[TaskRead], sort: SortState) -> list[TaskRead]:
    """Sort tasks by ``sort``; absent values go last in both directions.

    Equal values keep their input order.
    """
    present: list[tuple[str, TaskRead]] = []
    absent: list[TaskRead] = []
    for task in tasks:
        value = sort_value(task, sort.column)
        if value is None:
            absent.append(task)
        else:
            present.append((value, task))
    present.sort(key=lambda pair: pair[0], reverse=sort.direction is SortDirection.DESC)
    return [task for _, task in present] + absent
