"""Authenticated identity schema."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """Authenticated user resolved from a session token.

    This is the model injected into endpoints after successful
    authentication; ``user_id`` scopes every task and category query.
    """

    user_id: str = Field(min_length=1, max_length=255, description="User ID")
    email: str | None = Field(default=None, max_length=320, description="User email")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional user metadata")

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)
