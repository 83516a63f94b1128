"""Mock identity provider for testing.

Protocol-based test double: no mocking library needed.

Usage:
    provider = MockIdentityProvider({"alice-token": "alice", "bob-token": "bob"})
    app.dependency_overrides[get_identity_provider] = lambda: provider
"""

from __future__ import annotations

from collections.abc import Mapping

from taskboard_service.core.schemas.auth import AuthUser
from taskboard_service.infra.auth.protocols import IdentityServiceError, InvalidTokenError


class MockIdentityProvider:
    """Deterministic token registry with call recording."""

    def __init__(self, tokens: Mapping[str, str] | None = None, *, unavailable: bool = False) -> None:
        self._tokens: dict[str, str] = dict(tokens or {})
        self.unavailable = unavailable
        self.resolved: list[str] = []
        self.closed = False

    @classmethod
    def single_user(cls, user_id: str = "test-user", token: str = "test-token") -> MockIdentityProvider:
        return cls({token: user_id})

    def register_token(self, token: str, user_id: str) -> None:
        self._tokens[token] = user_id

    def revoke_token(self, token: str) -> None:
        self._tokens.pop(token, None)

    async def resolve(self, token: str) -> AuthUser:
        self.resolved.append(token)
        if self.unavailable:
            raise IdentityServiceError("mock identity service unavailable")
        user_id = self._tokens.get(token)
        if user_id is None:
            raise InvalidTokenError("unknown token")
        return AuthUser(user_id=user_id, email=f"{user_id}@example.test")

    async def close(self) -> None:
        self.closed = True
