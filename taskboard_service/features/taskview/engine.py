"""Task view engine: filter, sort and annotate the task table."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, tzinfo
from enum import StrEnum

from taskboard_service.features.taskview.filters import TaskFilters
from taskboard_service.features.taskview.sorting import SortColumn, SortState, sort_tasks
from taskboard_service.features.tasks.schemas import TaskRead
from taskboard_service.infra.logging import get_lazy_logger
from taskboard_service.utils.timestamps import same_local_date, to_utc, whole_days_until

lazy_logger = get_lazy_logger(__name__)

SOON_DAYS = 3


class DeadlineStatus(StrEnum):
    NONE = "none"
    OVERDUE = "overdue"
    TODAY = "today"
    SOON = "soon"
    FUTURE = "future"


def deadline_status(deadline: datetime | None, now: datetime, tz: tzinfo = UTC) -> DeadlineStatus:
    """Row styling class for a deadline."""
    if deadline is None:
        return DeadlineStatus.NONE
    if to_utc(deadline) < to_utc(now):
        return DeadlineStatus.OVERDUE
    if same_local_date(deadline, now, tz):
        return DeadlineStatus.TODAY
    if whole_days_until(deadline, now) <= SOON_DAYS:
        return DeadlineStatus.SOON
    return DeadlineStatus.FUTURE


def view(
    tasks: Iterable[TaskRead],
    filters: TaskFilters,
    sort: SortState,
    now: datetime,
    tz: tzinfo = UTC,
) -> list[TaskRead]:
    """Filter then sort ``tasks``."""
    return sort_tasks((task for task in tasks if filters.matches(task, now, tz)), sort)


def available_categories(tasks: Iterable[TaskRead]) -> list[str]:
    """Sorted distinct names of the categories actually used by ``tasks``."""
    return sorted({task.category.name for task in tasks if task.category is not None})


class TaskViewEngine:
    """Stateful task table for one view session.

    Holds the filter and sort state and remembers the last result; it is
    recomputed only when the snapshot version, filters, sort or ``now``
    changed since the previous call.
    """

    def __init__(self, tz: tzinfo = UTC) -> None:
        self.tz = tz
        self.filters = TaskFilters()
        self.sort = SortState()
        self._key: tuple[int, TaskFilters, SortState, datetime] | None = None
        self._rows: list[TaskRead] = []
        self.computations = 0

    def set_filters(self, filters: TaskFilters) -> None:
        self.filters = filters

    def clear_filters(self) -> None:
        self.filters = self.filters.cleared()

    def toggle_category(self, name: str) -> TaskFilters:
        self.filters = self.filters.toggle_category(name)
        return self.filters

    def toggle_sort(self, column: SortColumn | str) -> SortState:
        self.sort = self.sort.toggled(column)
        return self.sort

    def rows(self, tasks: Sequence[TaskRead], version: int, now: datetime) -> list[TaskRead]:
        key = (version, self.filters, self.sort, now)
        if key != self._key:
            self._rows = view(tasks, self.filters, self.sort, now, self.tz)
            self._key = key
            self.computations += 1
            lazy_logger.debug(
                lambda: f"view recomputed: {len(self._rows)}/{len(tasks)} rows (version {version})"
            )
        return list(self._rows)
