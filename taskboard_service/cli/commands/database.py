"""Database management commands.

Example:
    # Create missing tables
    taskboard-service db init

    # Check connectivity and row counts
    taskboard-service db check
"""

import sys

import click
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from taskboard_service.cli.utils import bullet, coro, error, info, success
from taskboard_service.core.settings import get_db_settings


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Create every table that does not exist yet."""
    from taskboard_service.core.database import Base
    from taskboard_service.features.tasks import models  # noqa: F401
    from taskboard_service.infra.database import engine

    info(f"Database: {get_db_settings().url.split('@')[-1]}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        error(f"Failed to create tables: {e}")
        sys.exit(1)
    success(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


@db.command()
@coro
async def check() -> None:
    """Verify connectivity and report table sizes."""
    from taskboard_service.features.tasks.models import Category, Task
    from taskboard_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
            success("Database connected successfully!")
            for model in (Task, Category):
                count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
                bullet(model.__tablename__, f"{count} rows", width=10)
    except SQLAlchemyError as e:
        error(f"Database check failed: {e}")
        sys.exit(1)
