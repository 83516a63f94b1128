"""CLI utilities for running async commands and formatting output."""

from taskboard_service.cli.utils.async_runner import coro
from taskboard_service.cli.utils.formatters import bullet, error, header, info, success, warning

__all__ = ["bullet", "coro", "error", "header", "info", "success", "warning"]
