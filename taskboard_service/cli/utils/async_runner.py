"""Run async click commands against the shared database engine."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any


def coro[T](f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """
    Decorator that makes an async function synchronous for Click.

    The engine's pool is disposed once the command finishes, on success or
    failure, so aiosqlite worker threads never outlive ``asyncio.run``.

    Usage:
        @db.command()
        @coro
        async def check():
            async with get_async_session() as session:
                ...
    """

    async def run(*args: Any, **kwargs: Any) -> T:
        from taskboard_service.infra.database import close_database

        try:
            return await f(*args, **kwargs)
        finally:
            await close_database()

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return asyncio.run(run(*args, **kwargs))

    return wrapper
