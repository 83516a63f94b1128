"""Prometheus metrics endpoint for observability.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    - http_requests_total, http_request_duration_seconds, http_requests_in_progress
    - database_query_duration_seconds
    - task_mutations_total, change_feed_events_total, change_feed_dropped_total
    - reminder_notifications_total, reminder_desktop_notifications_total
    - reminder_sessions_active, reminder_tick_duration_seconds
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from taskboard_service.infra.metrics import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
