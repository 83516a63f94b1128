"""Global exception handlers for FastAPI application.

Every error leaves the service as an RFC 7807 problem details document
(``application/problem+json``).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskboard_service.core.exceptions import AppException
from taskboard_service.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorDetail,
    ValidationProblemDetails,
)

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _problem_response(status_code: int, content: dict[str, Any], request: Request) -> JSONResponse:
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        media_type=PROBLEM_JSON,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions.

    Args:
        request: The FastAPI request object.
        exc: The application exception that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or request.url.path,
    )
    content = problem.model_dump(exclude_none=True)
    content.update(exc.extra)

    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    response = _problem_response(exc.status_code, content, request)
    if headers:
        response.headers.update(headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI/Pydantic request validation errors with field-level detail."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "fields": [error.field for error in errors],
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(errors)} field(s)",
        instance=request.url.path,
        errors=errors,
    )
    return _problem_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, problem.model_dump(exclude_none=True), request
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, answer with a generic 500."""
    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )

    problem = ProblemDetails(
        type="internal-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=request.url.path,
    )
    return _problem_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, problem.model_dump(exclude_none=True), request
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the RFC 7807 exception handlers.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
