"""Logging configuration setup.

Uses:
- dictConfig for root level and filters
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter for automatic context propagation
- JSONL format for machine parsing
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from queue import Queue
from typing import TYPE_CHECKING, Any

from taskboard_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from taskboard_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False

_TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def shutdown() -> None:
    """Stop the QueueListener and flush pending records."""
    global _log_queue, _listener

    if _listener is not None:
        _listener.stop()
        _listener = None

    _log_queue = None


def setup_logging(log_settings: LoggingSettings | None = None, *, force: bool = False) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings = log_settings
    if settings is None:
        from taskboard_service.core.settings import get_logging_settings

        settings = get_logging_settings()

    if force:
        shutdown()
    configure_logging(settings)
    _LOGGING_INITIALIZED = True


def configure_logging(settings: LoggingSettings) -> None:
    """Configure the root logger from settings.

    dictConfig sets the root level and filters; handlers are created here and
    attached to a QueueListener so request handlers never block on I/O.
    """
    global _log_queue, _listener

    file_path = settings.file_path if settings.file_enabled else None
    if file_path:
        file_path.parent.mkdir(parents=True, exist_ok=True)

    filters: dict[str, Any] = {}
    root_filters: list[str] = []
    if settings.include_context:
        filters["context"] = {
            "()": "taskboard_service.infra.logging.context.ContextInjectingFilter",
        }
        root_filters.append("context")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": filters,
            "root": {
                "level": settings.level,
                "handlers": [],
                "filters": root_filters,
            },
        }
    )

    handlers: list[logging.Handler] = []

    if settings.console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(settings.get_console_level())
        console_handler.setFormatter(_build_formatter(settings))
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=settings.file_max_bytes,
            backupCount=settings.file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(settings.get_file_level())
        file_handler.setFormatter(_build_formatter(settings))
        handlers.append(file_handler)

    _log_queue = Queue()
    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        atexit.register(shutdown)

    root = logging.getLogger()
    root.addHandler(QueueHandler(_log_queue))

    if not settings.include_uvicorn:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.captureWarnings(settings.capture_warnings)


def _build_formatter(settings: LoggingSettings) -> logging.Formatter:
    if settings.json_logs:
        return JSONFormatter(static={"service": settings.service_name})
    return logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_TEXT_DATEFMT)
