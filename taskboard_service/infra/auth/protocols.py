"""Identity provider protocol definitions.

Any class with a matching ``resolve`` coroutine satisfies the protocol
(structural subtyping), which lets tests swap in MockIdentityProvider
without a mocking library.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from taskboard_service.core.schemas.auth import AuthUser


class InvalidTokenError(Exception):
    """The identity provider does not recognise the token."""


class IdentityServiceError(Exception):
    """The identity provider could not be reached or answered unexpectedly."""


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves a session token to the user it belongs to.

    Implementations:
        - HttpIdentityProvider: external identity service over HTTP
        - StaticIdentityProvider: token table from settings (development)
        - MockIdentityProvider: test double
    """

    async def resolve(self, token: str) -> AuthUser:
        """Return the user bound to ``token``.

        Raises:
            InvalidTokenError: The token is unknown, expired or revoked.
            IdentityServiceError: The provider is unavailable.
        """
        ...

    async def close(self) -> None:
        """Release held resources (HTTP connections)."""
        ...
