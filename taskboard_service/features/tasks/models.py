"""SQLAlchemy models for the tasks feature."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskboard_service.core.database import UTCDateTime, OwnedBase


class Category(OwnedBase):
    """Named task category, scoped to one user.

    Categories are resolved by name when a task is saved and created on
    first use; a user never has two categories with the same name.
    """

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_categories_user_id_name"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name!r})>"


class Task(OwnedBase):
    """Task item persisted in the database."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    completed: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    deadline: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    reminder: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
        comment="Instant at which an in-app notification becomes due",
    )
    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    category: Mapped[Category | None] = relationship(Category, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, completed={self.completed})>"
