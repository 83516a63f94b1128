"""Domain events."""

from .base import DomainEvent

__all__ = ["DomainEvent"]
