"""Tasks feature: storage, service and HTTP API for a user's tasks."""

from taskboard_service.features.tasks.models import Category, Task
from taskboard_service.features.tasks.schemas import UNCATEGORIZED, TaskRead
from taskboard_service.features.tasks.service import TaskService
from taskboard_service.features.tasks.source import DatabaseTaskSource

__all__ = ["UNCATEGORIZED", "Category", "DatabaseTaskSource", "Task", "TaskRead", "TaskService"]
