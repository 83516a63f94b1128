"""Shared API schemas."""

from .auth import AuthUser
from .problem_details import ProblemDetails, ValidationErrorDetail, ValidationProblemDetails

__all__ = ["AuthUser", "ProblemDetails", "ValidationErrorDetail", "ValidationProblemDetails"]
