"""HTTP identity provider backed by an external auth service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from taskboard_service.core.schemas.auth import AuthUser
from taskboard_service.infra.auth.protocols import IdentityServiceError, InvalidTokenError

logger = logging.getLogger(__name__)


class HttpIdentityProvider:
    """Resolve bearer tokens with ``GET {base_url}{user_endpoint}``.

    The service is expected to answer 200 with a JSON user object
    (``id`` or ``user_id``, optional ``email``) and 401/403 for tokens it
    does not accept. Tokens are never retried; a rejected token is final.
    """

    def __init__(
        self,
        base_url: str,
        *,
        user_endpoint: str = "/user",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._user_endpoint = user_endpoint
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def resolve(self, token: str) -> AuthUser:
        try:
            response = await self._client.get(
                self._user_endpoint,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Identity service request failed",
                extra={"error": str(exc), "operation": "auth.resolve"},
            )
            raise IdentityServiceError(str(exc)) from exc

        if response.status_code in (401, 403):
            raise InvalidTokenError(f"identity service rejected token ({response.status_code})")
        if response.status_code != 200:
            logger.error(
                "Identity service returned unexpected status",
                extra={"status": response.status_code, "operation": "auth.resolve"},
            )
            raise IdentityServiceError(f"unexpected status {response.status_code}")

        return self._to_auth_user(response.json())

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _to_auth_user(payload: dict[str, Any]) -> AuthUser:
        user_id = payload.get("user_id") or payload.get("id")
        if not user_id:
            raise InvalidTokenError("identity service returned no user id")
        return AuthUser(
            user_id=str(user_id),
            email=payload.get("email"),
            metadata={k: v for k, v in payload.items() if k not in {"id", "user_id", "email"}},
        )
