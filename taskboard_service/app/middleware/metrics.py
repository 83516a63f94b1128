"""Prometheus instrumentation for HTTP requests."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from taskboard_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request, Response

UNMATCHED = "unmatched"


def _endpoint_label(request: Request) -> str:
    # Route template, e.g. "/api/v1/tasks/{task_id}"; only known after routing
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED)


def _trace_exemplar() -> dict[str, str] | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return {"trace_id": format(span_context.trace_id, "032x")}


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count and time requests per method and route template.

    Unrouted paths (404s) share the ``unmatched`` label so random URLs cannot
    grow the series count. WebSocket traffic is not seen by this middleware.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method
        in_progress = http_requests_in_progress.labels(method=method)
        in_progress.inc()
        started = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            in_progress.dec()
            endpoint = _endpoint_label(request)
            exemplar = _trace_exemplar()
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - started, exemplar=exemplar
            )
            http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc(exemplar=exemplar)
