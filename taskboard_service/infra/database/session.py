"""Async engine and sessions for the task store.

The engine is created at import from ``DatabaseSettings``. Every cursor
execution is timed into ``database_query_duration_seconds`` labelled by
statement verb.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskboard_service.core.database import Base
from taskboard_service.core.settings import get_app_settings, get_db_settings
from taskboard_service.infra.metrics.prometheus import database_query_duration_seconds

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

db_settings = get_db_settings()

engine = create_async_engine(
    db_settings.url,
    **{**db_settings.sqlalchemy_engine_kwargs(), "echo": db_settings.echo or get_app_settings().debug},
)

# Sessions outlive their commit so services can return the reloaded row
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

_VERBS = frozenset({"SELECT", "INSERT", "UPDATE", "DELETE", "BEGIN", "COMMIT", "ROLLBACK", "PRAGMA"})


def _statement_verb(statement: str) -> str:
    head = statement.split(None, 1)
    verb = head[0].upper() if head else ""
    return verb if verb in _VERBS else "OTHER"


if db_settings.is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        # Category deletes rely on ON DELETE SET NULL
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(engine.sync_engine, "before_cursor_execute")
def _start_timer(_conn: Any, _cursor: Any, _statement: str, _params: Any, context: Any, _many: bool) -> None:
    context._query_start_time = time.perf_counter()


@event.listens_for(engine.sync_engine, "after_cursor_execute")
def _observe_duration(_conn: Any, _cursor: Any, statement: str, _params: Any, context: Any, _many: bool) -> None:
    elapsed = time.perf_counter() - context._query_start_time
    histogram = database_query_duration_seconds.labels(operation=_statement_verb(statement))

    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        histogram.observe(elapsed, exemplar={"trace_id": format(span_context.trace_id, "032x")})
    else:
        histogram.observe(elapsed)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Session scoped to the ``async with`` block.

    Example:
        async with get_async_session() as session:
            tasks = await repo.list_for_user(session, user_id)
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_database() -> None:
    """Verify connectivity and create missing tables when ``DB_CREATE_TABLES`` is set.

    Raises:
        SQLAlchemyError: If the database cannot be reached.
    """
    # Register models on Base.metadata
    from taskboard_service.features.tasks import models  # noqa: F401

    safe_url = engine.url.render_as_string(hide_password=True)
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if db_settings.create_tables:
                await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("Failed to connect to database", extra={"url": safe_url, "error": str(e)})
        raise

    logger.info(
        "Task store ready",
        extra={"url": safe_url, "create_tables": db_settings.create_tables, "tables": sorted(Base.metadata.tables)},
    )


async def close_database() -> None:
    """Dispose of the engine connection pool."""
    await engine.dispose()
    logger.info("Database connections closed")


__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
