"""Task table filters."""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from taskboard_service.features.tasks.schemas import TaskRead
from taskboard_service.utils.timestamps import same_local_date, to_utc


class DeadlineBucket(StrEnum):
    ALL = "all"
    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"
    NO_DEADLINE = "no-deadline"


class CompletionBucket(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class TaskFilters(BaseModel):
    """Active filter state of a task table.

    An empty category set means "every category"; tasks without a
    category match the name ``Uncategorized``.
    """

    categories: frozenset[str] = Field(default_factory=frozenset)
    deadline: DeadlineBucket = DeadlineBucket.ALL
    completion: CompletionBucket = CompletionBucket.ALL

    model_config = ConfigDict(frozen=True)

    @property
    def is_active(self) -> bool:
        return bool(self.categories) or self.deadline is not DeadlineBucket.ALL or (
            self.completion is not CompletionBucket.ALL
        )

    def toggle_category(self, name: str) -> TaskFilters:
        """Add ``name`` to the category set, or remove it when already present."""
        categories = set(self.categories)
        if name in categories:
            categories.remove(name)
        else:
            categories.add(name)
        return self.model_copy(update={"categories": frozenset(categories)})

    def cleared(self) -> TaskFilters:
        return TaskFilters()

    def matches(self, task: TaskRead, now: datetime, tz: tzinfo) -> bool:
        if self.categories and task.category_name not in self.categories:
            return False
        if not _deadline_matches(self.deadline, task.deadline, now, tz):
            return False
        if self.completion is CompletionBucket.COMPLETED:
            return task.completed
        if self.completion is CompletionBucket.PENDING:
            return not task.completed
        return True


def _deadline_matches(
    bucket: DeadlineBucket,
    deadline: datetime | None,
    now: datetime,
    tz: tzinfo,
) -> bool:
    if bucket is DeadlineBucket.ALL:
        return True
    if bucket is DeadlineBucket.NO_DEADLINE:
        return deadline is None
    if deadline is None:
        return False
    match bucket:
        case DeadlineBucket.OVERDUE:
            return to_utc(deadline) < to_utc(now)
        case DeadlineBucket.TODAY:
            return same_local_date(deadline, now, tz)
        case DeadlineBucket.UPCOMING:
            return to_utc(deadline) > to_utc(now)
    return True
