"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard_service.core.dependencies import OptionalChangeFeed, get_db_session
from taskboard_service.core.dependencies.reminders import OptionalReminderManager
from taskboard_service.core.settings import get_app_settings
from taskboard_service.features.health.schemas import HealthResponse
from taskboard_service.features.reminders.clock import utc_now

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Report database reachability, change feed and reminder session state.",
)
async def health(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    feed: OptionalChangeFeed,
    manager: OptionalReminderManager,
) -> HealthResponse:
    settings = get_app_settings()
    checks = {
        "database": await _database_ok(session),
        "change_feed": feed is not None and not feed.closed,
        "reminders": manager is not None,
    }
    healthy = all(checks.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.service_name,
        version=settings.version,
        timestamp=utc_now(),
        checks=checks,
        active_sessions=manager.active_count if manager is not None else 0,
    )


async def _database_ok(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check: database unreachable", extra={"error": str(exc)})
        return False
    return True
