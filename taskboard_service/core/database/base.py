"""Declarative base and the mixins every persisted row is built from.

All rows belong to one user and carry a UUID key plus create/update
timestamps:

    class Task(OwnedBase):
        __tablename__ = "tasks"
        title: Mapped[str] = mapped_column(String(500))
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from .types import UTCDateTime

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative base; table name defaults to the lowercased class name."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()


class UUIDPKMixin:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Python-side defaults for the ORM, server defaults for raw inserts.

    ``created_at`` orders the task list, newest first.
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=_utcnow, server_default=func.now(), nullable=False, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False,
    )


class OwnedMixin:
    """Owner column: the user id handed out by the identity provider."""

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)


class OwnedBase(Base, UUIDPKMixin, TimestampMixin, OwnedMixin):
    __abstract__ = True
