"""Lazy evaluation support for logging.

Expensive DEBUG messages are passed as callables and only evaluated when the
level is enabled:

    logger = get_lazy_logger(__name__)
    logger.debug(lambda: f"snapshot: {[t.id for t in tasks]}")
"""

from __future__ import annotations

import logging
from typing import Any


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that evaluates callable messages and args on demand.

    Context bound at creation is merged under each call's own ``extra``.
    """

    def log(
        self,
        level: int,
        msg: Any,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()

        evaluated_args = tuple(arg() if callable(arg) else arg for arg in args)
        super().log(level, msg, *evaluated_args, **kwargs)

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        if self.extra:
            kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get logger with lazy evaluation support.

    Args:
        name: Logger name (usually __name__).
        **context: Optional context to bind to logger.

    Returns:
        Logger adapter with lazy evaluation support.
    """
    return LazyLoggerAdapter(logging.getLogger(name), context)
