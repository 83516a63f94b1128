"""Integration tests for health and metrics endpoints."""

from __future__ import annotations


async def test_health_reports_components(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": True, "change_feed": True, "reminders": True}
    assert body["active_sessions"] == 0


async def test_health_degraded_without_feed(client):
    from taskboard_service.infra.realtime import stop_change_feed

    stop_change_feed()

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["checks"]["change_feed"] is False


async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["x-request-id"] == "req-123"


async def test_metrics_exposes_domain_series(client, auth_headers, create_task):
    await create_task()

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "task_mutations_total" in response.text
    assert "reminder_sessions_active" in response.text
    assert "http_requests_total" in response.text
