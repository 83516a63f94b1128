"""Database dependencies for FastAPI route handlers.

Two session getters exist:

1. ``get_db_session()`` (this module): FastAPI dependency, session
   lifecycle tied to the HTTP request.
2. ``get_async_session()`` (infra.database): framework-agnostic async
   context manager used by view sessions and the CLI.

Both use the same session factory.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.

    Example:
        @router.get("/tasks")
        async def list_tasks(session: Annotated[AsyncSession, Depends(get_db_session)]):
            ...
    """
    async with get_async_session() as session:
        yield session
