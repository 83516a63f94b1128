"""Application exceptions rendered as RFC 7807 problem details.

Handlers in ``app.exception_handlers`` turn any ``AppException`` into a
``ProblemDetails`` response using the attributes below.
"""

from __future__ import annotations

from typing import Any, ClassVar


class AppException(Exception):
    """Base application exception.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Problem type identifier, e.g. ``task-not-found``.
        title: Short summary of the problem type.
        instance: URI of this occurrence; the request path when omitted.
        extra: Additional context merged into the problem body.

    Example:
        raise AppException(
            status_code=404,
            detail="Task with ID 7f0c... not found",
            type="task-not-found",
            extra={"task_id": "7f0c..."},
        )
    """

    _TITLES: ClassVar[dict[int, str]] = {
        400: "Bad Request",
        401: "Unauthorized",
        404: "Not Found",
        422: "Validation Error",
        500: "Internal Server Error",
        503: "Service Unavailable",
    }

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._TITLES.get(status_code, "Error")
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


class _StatusException(AppException):
    """Fixed-status subclass; only ``detail`` is required."""

    status: ClassVar[int] = 500
    default_type: ClassVar[str] = "about:blank"

    def __init__(
        self,
        detail: str,
        type: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.status,
            detail=detail,
            type=type or self.default_type,
            instance=instance,
            extra=extra,
        )


class BadRequestException(_StatusException):
    """Malformed request, e.g. a blank task title."""

    status = 400
    default_type = "bad-request"


class UnauthorizedException(_StatusException):
    status = 401
    default_type = "unauthorized"


class NotFoundException(_StatusException):
    """Missing resource. Tasks owned by another user are reported the same way."""

    status = 404
    default_type = "not-found"


class ValidationException(_StatusException):
    status = 422
    default_type = "validation-error"


class InternalServerException(_StatusException):
    """Store failure, e.g. ``Failed to create task``."""

    status = 500
    default_type = "internal-error"


class ServiceUnavailableException(_StatusException):
    """A dependency (identity provider, store, reminder manager) is unreachable."""

    status = 503
    default_type = "service-unavailable"


# ============================================================================
# Authentication Exceptions
# ============================================================================


class MissingAuthenticationError(UnauthorizedException):
    """No session token accompanied the request."""

    def __init__(
        self,
        detail: str = "Authentication required",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type="missing-authentication", instance=instance, extra=extra)


class TokenInvalidError(UnauthorizedException):
    """The identity provider rejected the token.

    The client-facing detail stays generic; ``reason`` only lands in ``extra``.
    """

    def __init__(
        self,
        reason: str | None = None,
        detail: str = "Authentication required",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        final_extra = {"reason": reason} if reason else {}
        if extra:
            final_extra.update(extra)
        super().__init__(detail=detail, type="token-invalid", instance=instance, extra=final_extra or None)
