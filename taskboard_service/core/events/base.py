"""Domain event base class.

Task mutations publish events to the in-process change feed after commit;
mounted view sessions merge them into their snapshot. Events are frozen so
every subscriber sees the same record.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Subclasses must define ``event_type`` (e.g. ``"task.created"``).
    """

    event_type: ClassVar[str] = "domain.event"

    event_id: str = Field(default_factory=lambda: str(uuid4()), description="Unique event identifier")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Event time in UTC")
    correlation_id: str | None = Field(
        default=None,
        description="Request ID of the request that caused this event",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.event_type == "domain.event":
            msg = f"{cls.__name__} must define event_type"
            raise TypeError(msg)

    def to_log_extra(self) -> dict[str, Any]:
        """Identifying fields for a log record's ``extra``."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "correlation_id": self.correlation_id,
        }
