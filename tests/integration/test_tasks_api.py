"""Integration tests for the tasks API."""

from __future__ import annotations

from uuid import uuid4

import pytest

API = "/api/v1/tasks"


class TestAuthentication:
    async def test_missing_token(self, client):
        response = await client.get(f"{API}/")

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["type"] == "missing-authentication"

    async def test_unknown_token(self, client):
        response = await client.get(f"{API}/", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["type"] == "token-invalid"

    async def test_fallback_header(self, client):
        response = await client.get(f"{API}/", headers={"X-Auth-Token": "test-token"})

        assert response.status_code == 200

    async def test_identity_service_down(self, client, identity_provider, auth_headers):
        identity_provider.unavailable = True

        response = await client.get(f"{API}/", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["type"] == "identity-unavailable"


class TestCreate:
    async def test_create_task(self, client, auth_headers):
        response = await client.post(
            f"{API}/",
            json={
                "title": "  Write report ",
                "description": "Quarterly",
                "category": "Work",
                "deadline": "2024-02-01T17:00:00Z",
                "reminder": "2024-02-01T16:00:00Z",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Write report"
        assert body["category"]["name"] == "Work"
        assert body["completed"] is False
        assert body["deadline"].startswith("2024-02-01T17:00:00")
        assert body["reminder"].startswith("2024-02-01T16:00:00")

    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}])
    async def test_title_required(self, client, auth_headers, payload):
        response = await client.post(f"{API}/", json=payload, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Task title is required"
        assert body["status"] == 400
        assert "request_id" in body

    async def test_malformed_dates_are_ignored(self, client, auth_headers):
        response = await client.post(
            f"{API}/",
            json={"title": "t", "deadline": "next tuesday", "reminder": ""},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["deadline"] is None
        assert response.json()["reminder"] is None


class TestReadUpdateDelete:
    async def test_get_and_list(self, client, auth_headers, create_task):
        created = await create_task(title="One", category="Home")

        fetched = await client.get(f"{API}/{created['id']}", headers=auth_headers)
        listed = await client.get(f"{API}/", headers=auth_headers)
        categories = await client.get(f"{API}/categories", headers=auth_headers)

        assert fetched.status_code == 200
        assert fetched.json()["title"] == "One"
        assert listed.json()["total"] == 1
        assert categories.json() == {"items": ["Home"]}

    async def test_unknown_task(self, client, auth_headers):
        response = await client.get(f"{API}/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["type"] == "task-not-found"

    async def test_invalid_id(self, client, auth_headers):
        response = await client.get(f"{API}/not-a-uuid", headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["errors"]

    async def test_other_users_task_is_hidden(self, client, other_auth_headers, create_task):
        created = await create_task()

        response = await client.get(f"{API}/{created['id']}", headers=other_auth_headers)

        assert response.status_code == 404

    async def test_patch_toggles_completion(self, client, auth_headers, create_task):
        created = await create_task(reminder="2024-02-01T16:00:00Z")

        response = await client.patch(f"{API}/{created['id']}", json={"completed": True}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["completed"] is True
        assert response.json()["reminder"] is not None

    async def test_put_replaces_fields(self, client, auth_headers, create_task):
        created = await create_task(category="Work", reminder="2024-02-01T16:00:00Z")

        response = await client.put(f"{API}/{created['id']}", json={"title": "Renamed"}, headers=auth_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["title"] == "Renamed"
        assert body["category"] is None
        assert body["reminder"] is None

    async def test_put_blank_title(self, client, auth_headers, create_task):
        created = await create_task()

        response = await client.put(f"{API}/{created['id']}", json={"title": " "}, headers=auth_headers)

        assert response.status_code == 400

    async def test_delete(self, client, auth_headers, create_task):
        created = await create_task()

        deleted = await client.delete(f"{API}/{created['id']}", headers=auth_headers)
        again = await client.delete(f"{API}/{created['id']}", headers=auth_headers)

        assert deleted.status_code == 204
        assert again.status_code == 404


class TestTableView:
    async def test_filter_and_sort(self, client, auth_headers, create_task):
        await create_task(title="b", category="Work")
        await create_task(title="a", category="Work")
        done = await create_task(title="c", category="Home")
        await client.patch(f"{API}/{done['id']}", json={"completed": True}, headers=auth_headers)

        response = await client.get(
            f"{API}/view",
            params={"completion": "pending", "sort": "title", "direction": "asc"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert [row["task"]["title"] for row in body["rows"]] == ["a", "b"]
        assert body["shown"] == 2
        assert body["total"] == 3
        assert body["categories"] == ["Home", "Work"]
        assert body["filters_active"] is True

    async def test_category_filter_is_repeatable(self, client, auth_headers, create_task):
        await create_task(title="w", category="Work")
        await create_task(title="h", category="Home")
        await create_task(title="u")

        response = await client.get(
            f"{API}/view",
            params=[("category", "Home"), ("category", "Uncategorized"), ("sort", "title"), ("direction", "asc")],
            headers=auth_headers,
        )

        assert [row["task"]["title"] for row in response.json()["rows"]] == ["h", "u"]

    async def test_invalid_bucket(self, client, auth_headers):
        response = await client.get(f"{API}/view", params={"deadline": "someday"}, headers=auth_headers)

        assert response.status_code == 422

    async def test_rows_carry_deadline_annotations(self, client, auth_headers, create_task):
        await create_task(title="old", deadline="2000-01-01T00:00:00Z")
        await create_task(title="none")

        response = await client.get(f"{API}/view", params={"sort": "title", "direction": "asc"}, headers=auth_headers)

        rows = response.json()["rows"]
        assert [(r["task"]["title"], r["deadline_status"]) for r in rows] == [("none", "none"), ("old", "overdue")]
        assert rows[0]["deadline_label"] == "-"
        assert rows[1]["deadline_label"] == "Jan 1, 2000 at 12:00 AM"
