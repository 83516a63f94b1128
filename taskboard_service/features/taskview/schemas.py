"""Pydantic schemas for task table views."""

from __future__ import annotations

from datetime import datetime, tzinfo

from pydantic import BaseModel, Field

from taskboard_service.features.reminders.formatting import format_deadline, to_datetime_local
from taskboard_service.features.taskview.engine import DeadlineStatus, deadline_status
from taskboard_service.features.taskview.filters import TaskFilters
from taskboard_service.features.taskview.sorting import SortState
from taskboard_service.features.tasks.schemas import TaskRead


class TaskRow(BaseModel):
    """One table row: the task plus its display annotations."""

    task: TaskRead
    category_name: str
    deadline_status: DeadlineStatus
    deadline_label: str = Field(description="Deadline as display text, '-' when absent")
    deadline_input: str = Field(default="", description="Deadline as a datetime-local edit value")
    reminder_input: str = Field(default="", description="Reminder as a datetime-local edit value")
    updating: bool = Field(default=False, description="An edit of this task is awaiting confirmation")

    @classmethod
    def build(cls, task: TaskRead, now: datetime, tz: tzinfo, *, updating: bool = False) -> TaskRow:
        return cls(
            task=task,
            category_name=task.category_name,
            deadline_status=deadline_status(task.deadline, now, tz),
            deadline_label=format_deadline(task.deadline, tz) if task.deadline else "-",
            deadline_input=to_datetime_local(task.deadline, tz),
            reminder_input=to_datetime_local(task.reminder, tz),
            updating=updating,
        )


class TaskTableView(BaseModel):
    """Filtered and sorted task table."""

    rows: list[TaskRow]
    shown: int = Field(description="Rows after filtering")
    total: int = Field(description="Tasks before filtering")
    categories: list[str] = Field(description="Category names available for filtering")
    filters: TaskFilters
    filters_active: bool
    sort: SortState
    now: datetime


class FilterUpdate(BaseModel):
    """Replacement filter state for a mounted view."""

    categories: list[str] = Field(default_factory=list)
    deadline: str = "all"
    completion: str = "all"

    def to_filters(self) -> TaskFilters:
        return TaskFilters.model_validate(
            {"categories": self.categories, "deadline": self.deadline, "completion": self.completion}
        )
