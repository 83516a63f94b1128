"""Service layer base classes."""

from .base import UserScopedService

__all__ = ["UserScopedService"]
