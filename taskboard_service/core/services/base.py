"""Base class for per-user services."""

from __future__ import annotations

import logging
from typing import Any

from taskboard_service.infra.logging import get_lazy_logger


class UserScopedService:
    """Service bound to the authenticated user it acts for.

    Loggers:
        - self.logger: Standard logger for INFO/WARNING/ERROR (always evaluated)
        - self._lazy: Lazy logger for DEBUG (zero overhead when DEBUG disabled)

    Example:
        class TaskService(UserScopedService):
            def __init__(self, session: AsyncSession, user_id: str):
                super().__init__(user_id)
                self._session = session

            async def delete_task(self, task_id):
                ...
                self.logger.info("Task deleted", extra=self._log_extra("delete_task", task_id=str(task_id)))
    """

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        class_name = self.__class__.__name__
        self.logger = logging.getLogger(class_name)
        self._lazy = get_lazy_logger(class_name)

    def _log_extra(self, operation: str, **fields: Any) -> dict[str, Any]:
        """``extra`` for a log record: the fields plus user id and ``service.<operation>``."""
        return {**fields, "user_id": self.user_id, "operation": f"service.{operation}"}
