"""Core database package: declarative base, mixins, column types and the owned repository.

Base Classes and Mixins:
    - Base: Declarative base with auto table naming
    - UUIDPKMixin, TimestampMixin, OwnedMixin
    - OwnedBase: UUID PK + timestamps + owning user

Repository:
    - OwnedRepository[T]: create/delete and user-scoped selects, explicit session passing
"""

from __future__ import annotations

from .base import NAMING_CONVENTION, Base, OwnedBase, OwnedMixin, TimestampMixin, UUIDPKMixin
from .repository import OwnedRepository
from .types import UTCDateTime

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "OwnedBase",
    "OwnedMixin",
    "OwnedRepository",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDPKMixin",
]
