"""Authentication dependencies for FastAPI endpoints.

The session token is read from ``Authorization: Bearer <token>`` or, as a
fallback, from ``X-Auth-Token``. WebSocket clients pass it as the
``token`` query parameter. Tokens are resolved by the configured
IdentityProvider; a missing or rejected token is a 401 and is never
retried.

Usage:
    @router.get("/tasks/")
    async def list_tasks(user: AuthUserDep):
        return {"user_id": user.user_id}

Tests swap the provider:
    app.dependency_overrides[get_identity_provider] = lambda: MockIdentityProvider.single_user()
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header

from taskboard_service.core.exceptions import (
    MissingAuthenticationError,
    ServiceUnavailableException,
    TokenInvalidError,
)
from taskboard_service.core.schemas.auth import AuthUser
from taskboard_service.core.settings import get_auth_settings
from taskboard_service.infra.auth import (
    HttpIdentityProvider,
    IdentityProvider,
    IdentityServiceError,
    InvalidTokenError,
    StaticIdentityProvider,
)
from taskboard_service.infra.logging.context import set_log_context

logger = logging.getLogger(__name__)

_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """Get the process-wide identity provider, building it on first use."""
    global _provider
    if _provider is None:
        settings = get_auth_settings()
        if settings.backend == "http":
            _provider = HttpIdentityProvider(
                str(settings.service_url),
                user_endpoint=settings.user_endpoint,
                timeout=settings.request_timeout,
            )
        else:
            if not settings.static_tokens:
                logger.warning(
                    "Static identity backend has no tokens configured; every request will be rejected",
                    extra={"operation": "auth.init"},
                )
            _provider = StaticIdentityProvider(settings.static_tokens)
        logger.info("Identity provider ready", extra={"backend": settings.backend})
    return _provider


async def close_identity_provider() -> None:
    global _provider
    if _provider is not None:
        await _provider.close()
        _provider = None


def extract_token(authorization: str | None, x_auth_token: str | None) -> str | None:
    """Pick the session token out of the request headers."""
    scheme = get_auth_settings().token_scheme
    if authorization:
        prefix, _, value = authorization.partition(" ")
        if prefix.lower() == scheme.lower() and value.strip():
            return value.strip()
    if x_auth_token and x_auth_token.strip():
        return x_auth_token.strip()
    return None


async def authenticate(provider: IdentityProvider, token: str | None) -> AuthUser:
    """Resolve ``token`` to a user.

    Raises:
        MissingAuthenticationError: No token.
        TokenInvalidError: The provider rejected the token.
        ServiceUnavailableException: The provider could not be reached.
    """
    if not token:
        raise MissingAuthenticationError()
    try:
        user = await provider.resolve(token)
    except InvalidTokenError as exc:
        logger.info("Token rejected", extra={"reason": str(exc), "operation": "auth.resolve"})
        raise TokenInvalidError(reason=str(exc)) from exc
    except IdentityServiceError as exc:
        logger.warning(
            "Identity provider unavailable",
            extra={"error": str(exc), "operation": "auth.resolve"},
        )
        raise ServiceUnavailableException(
            detail="Identity service unavailable",
            type="identity-unavailable",
        ) from exc

    set_log_context(user_id=user.user_id)
    return user


async def get_current_user(
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    authorization: Annotated[str | None, Header()] = None,
    x_auth_token: Annotated[str | None, Header(alias="X-Auth-Token")] = None,
) -> AuthUser:
    """Get the currently authenticated user.

    Raises:
        MissingAuthenticationError: 401 when no token accompanies the request.
        TokenInvalidError: 401 when the token is not recognised.
    """
    return await authenticate(provider, extract_token(authorization, x_auth_token))


AuthUserDep = Annotated[AuthUser, Depends(get_current_user)]
"""Authenticated user dependency.

Example:
    @router.get("/me")
    async def me(user: AuthUserDep):
        return {"user_id": user.user_id}
"""

IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]
