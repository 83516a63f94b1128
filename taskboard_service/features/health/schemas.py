"""Pydantic schemas for health checks."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    service: str
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(default_factory=dict)
    active_sessions: int = 0
