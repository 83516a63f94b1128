"""WebSocket protocol tests for the reminder view session.

These run the real application lifespan through Starlette's TestClient, so
the change feed and reminder manager are the process-wide ones.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from taskboard_service.app.main import create_app
from taskboard_service.core.dependencies import get_identity_provider
from taskboard_service.infra.auth.testing import MockIdentityProvider
from tests.utils import TEST_TOKEN, TEST_USER

WS = "/api/v1/reminders/ws"


@pytest.fixture
def ws_client():
    app = create_app()
    app.dependency_overrides[get_identity_provider] = lambda: MockIdentityProvider.single_user(TEST_USER, TEST_TOKEN)
    with TestClient(app) as client:
        yield client


def _connect(client: TestClient):
    return client.websocket_connect(f"{WS}?token={TEST_TOKEN}")


def test_initial_messages(ws_client):
    with _connect(ws_client) as ws:
        connected = ws.receive_json()
        bell = ws.receive_json()
        table = ws.receive_json()

    assert connected == {"type": "connected", "data": {"user_id": TEST_USER}}
    assert bell["type"] == "bell"
    assert bell["data"]["unread_count"] == 0
    assert table["type"] == "table"
    assert table["data"]["sort"] == {"column": "created_at", "direction": "desc"}


def test_ping_and_errors(ws_client):
    with _connect(ws_client) as ws:
        for _ in range(3):
            ws.receive_json()

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_text("not json")
        assert ws.receive_json()["code"] == "invalid_json"

        ws.send_json({"type": "reboot"})
        error = ws.receive_json()
        assert error == {"type": "error", "code": "unknown_type", "message": "Unknown message type: reboot"}

        ws.send_json({"type": "sort", "column": "priority"})
        assert ws.receive_json()["code"] == "invalid_message"

        ws.send_json({"type": "filters", "completion": "maybe"})
        assert ws.receive_json()["code"] == "invalid_message"

        ws.send_json({"type": "toggle_category"})
        error = ws.receive_json()
        assert error == {
            "type": "error",
            "code": "invalid_message",
            "message": "toggle_category requires a category name",
        }


def test_table_and_bell_actions(ws_client):
    with _connect(ws_client) as ws:
        for _ in range(3):
            ws.receive_json()

        ws.send_json({"type": "sort", "column": "title"})
        table = ws.receive_json()
        assert table["type"] == "table"
        assert table["data"]["sort"] == {"column": "title", "direction": "asc"}

        ws.send_json({"type": "filters", "completion": "pending"})
        table = ws.receive_json()
        assert table["data"]["filters"]["completion"] == "pending"
        assert table["data"]["filters_active"] is True

        ws.send_json({"type": "toggle_category", "category": "Work"})
        table = ws.receive_json()
        assert table["data"]["filters"]["categories"] == ["Work"]
        assert table["data"]["filters"]["completion"] == "pending"

        ws.send_json({"type": "open"})
        assert ws.receive_json()["type"] == "bell"

        ws.send_json({"type": "dismiss", "id": "unknown"})
        assert ws.receive_json()["type"] == "bell"

        ws.send_json({"type": "clear"})
        assert ws.receive_json()["data"]["notifications"] == []


@pytest.mark.parametrize("query", ["", "?token=wrong"])
def test_rejected_token_closes_with_policy_violation(ws_client, query):
    with pytest.raises(WebSocketDisconnect) as exc_info, ws_client.websocket_connect(f"{WS}{query}"):
        pass

    assert exc_info.value.code == 1008
