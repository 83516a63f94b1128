"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "bad-request",
                "title": "Bad Request",
                "status": 400,
                "detail": "Task title is required",
                "instance": "/api/v1/tasks/",
            }
        },
        str_strip_whitespace=True,
        extra="allow",
    )


class ValidationErrorDetail(BaseModel):
    """Single field error inside a validation problem."""

    field: str = Field(description="Dotted location of the invalid field")
    message: str = Field(description="What is wrong with it")
    type: str = Field(description="Error type identifier")
    value: Any | None = Field(default=None, description="Rejected input, when safe to echo")


class ValidationProblemDetails(ProblemDetails):
    """Problem details carrying per-field validation errors."""

    errors: list[ValidationErrorDetail] = Field(default_factory=list)
