"""Static token table identity provider for local development."""

from __future__ import annotations

from collections.abc import Mapping

from taskboard_service.core.schemas.auth import AuthUser
from taskboard_service.infra.auth.protocols import InvalidTokenError


class StaticIdentityProvider:
    """Resolve tokens from a fixed ``token -> user id`` mapping.

    Configured with AUTH_STATIC_TOKENS='{"dev-token": "dev-user"}'.
    """

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    async def resolve(self, token: str) -> AuthUser:
        user_id = self._tokens.get(token)
        if user_id is None:
            raise InvalidTokenError("unknown token")
        return AuthUser(user_id=user_id)

    async def close(self) -> None:
        return None
