"""Database infrastructure: engine, session factory and lifecycle hooks."""

from .session import AsyncSessionLocal, close_database, engine, get_async_session, init_database

__all__ = [
    "AsyncSessionLocal",
    "close_database",
    "engine",
    "get_async_session",
    "init_database",
]
