"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings for running without external infrastructure
    - Reminder Fixtures: reminder settings and a fake task source
    - Database Fixtures: SQLAlchemy engine, session factory and session
    - Realtime Fixtures: change feed and reminder session manager
    - Application Fixtures: FastAPI app, HTTP client and auth headers

Reminder tickers are configured with an hour-long cadence so they never
fire on their own during a test; tests drive ticks explicitly.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp()) / 'taskboard-test.db'}")
os.environ.setdefault("AUTH_BACKEND", "static")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("REMINDER_TICK_SECONDS", "3600")
os.environ.setdefault("REMINDER_VIEW_TICK_SECONDS", "3600")
os.environ.setdefault("REMINDER_NOTIFIER_PERMISSION", "granted")

from taskboard_service.core.settings import ReminderSettings  # noqa: E402
from taskboard_service.infra.auth.testing import MockIdentityProvider  # noqa: E402
from tests.utils import OTHER_TOKEN, OTHER_USER, TEST_TOKEN, TEST_USER, FakeTaskSource  # noqa: E402


# ============================================================================
# Reminder Fixtures
# ============================================================================


@pytest.fixture
def reminder_settings() -> ReminderSettings:
    return ReminderSettings(tick_seconds=3600, view_tick_seconds=3600, notifier_permission="granted")


@pytest.fixture
def task_source() -> FakeTaskSource:
    return FakeTaskSource()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with every table created.

    StaticPool keeps a single connection so the in-memory database is shared
    by every session made from this engine.
    """
    from taskboard_service.core.database import Base
    from taskboard_service.features.tasks import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


# ============================================================================
# Realtime Fixtures
# ============================================================================


@pytest.fixture
def change_feed():
    """Process-wide change feed, closed after the test."""
    from taskboard_service.infra.realtime import start_change_feed, stop_change_feed

    feed = start_change_feed(queue_size=100)
    yield feed
    stop_change_feed()


@pytest.fixture
async def reminder_manager(session_factory, change_feed, reminder_settings):
    """Process-wide reminder session manager reading from the test database."""
    from taskboard_service.features.reminders.manager import start_reminder_manager, stop_reminder_manager
    from taskboard_service.features.tasks.source import DatabaseTaskSource

    manager = start_reminder_manager(DatabaseTaskSource(session_factory), change_feed, reminder_settings)
    yield manager
    await stop_reminder_manager()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def identity_provider() -> MockIdentityProvider:
    return MockIdentityProvider({TEST_TOKEN: TEST_USER, OTHER_TOKEN: OTHER_USER})


@pytest.fixture
async def app(session_factory, identity_provider, reminder_manager):
    """FastAPI application wired to the test database and identity provider.

    ASGITransport does not run the lifespan, so the change feed and reminder
    manager come from fixtures instead.
    """
    from taskboard_service.app.main import create_app
    from taskboard_service.core.dependencies import get_db_session, get_identity_provider

    application = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_identity_provider] = lambda: identity_provider
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {OTHER_TOKEN}"}


@pytest.fixture
def create_task(client: AsyncClient, auth_headers: dict[str, str]):
    """Create a task through the API and return its JSON body."""

    async def _create(**fields: Any) -> dict[str, Any]:
        fields.setdefault("title", "Write report")
        response = await client.post("/api/v1/tasks/", json=fields, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
