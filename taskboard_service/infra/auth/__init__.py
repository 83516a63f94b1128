"""Identity providers resolving session tokens to users."""

from taskboard_service.infra.auth.http_client import HttpIdentityProvider
from taskboard_service.infra.auth.protocols import (
    IdentityProvider,
    IdentityServiceError,
    InvalidTokenError,
)
from taskboard_service.infra.auth.static import StaticIdentityProvider
from taskboard_service.infra.auth.testing import MockIdentityProvider

__all__ = [
    "HttpIdentityProvider",
    "IdentityProvider",
    "IdentityServiceError",
    "InvalidTokenError",
    "MockIdentityProvider",
    "StaticIdentityProvider",
]
