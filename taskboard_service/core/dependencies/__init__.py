"""FastAPI dependencies for route handlers.

Features import their dependencies from here rather than from ``infra/``
directly; this module is the composition root for dependency injection.
"""

from taskboard_service.core.dependencies.auth import (
    AuthUserDep,
    IdentityProviderDep,
    authenticate,
    close_identity_provider,
    extract_token,
    get_current_user,
    get_identity_provider,
)
from taskboard_service.core.dependencies.database import get_db_session
from taskboard_service.core.dependencies.realtime import (
    ChangeFeedDep,
    OptionalChangeFeed,
    get_feed,
    optional_change_feed,
    require_change_feed,
)

__all__ = [
    "AuthUserDep",
    "ChangeFeedDep",
    "IdentityProviderDep",
    "OptionalChangeFeed",
    "authenticate",
    "close_identity_provider",
    "extract_token",
    "get_current_user",
    "get_db_session",
    "get_feed",
    "get_identity_provider",
    "optional_change_feed",
    "require_change_feed",
]
