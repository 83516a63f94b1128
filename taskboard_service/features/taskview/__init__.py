"""Task table engine: filtering, sorting and deadline status."""

from taskboard_service.features.taskview.engine import (
    DeadlineStatus,
    TaskViewEngine,
    available_categories,
    deadline_status,
    view,
)
from taskboard_service.features.taskview.filters import CompletionBucket, DeadlineBucket, TaskFilters
from taskboard_service.features.taskview.sorting import SortColumn, SortDirection, SortState, sort_tasks

__all__ = [
    "CompletionBucket",
    "DeadlineBucket",
    "DeadlineStatus",
    "SortColumn",
    "SortDirection",
    "SortState",
    "TaskFilters",
    "TaskViewEngine",
    "available_categories",
    "deadline_status",
    "sort_tasks",
    "view",
]
