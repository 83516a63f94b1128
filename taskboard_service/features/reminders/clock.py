"""Clock functions and periodic tickers for view sessions."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, tzinfo

from taskboard_service.infra.logging import get_lazy_logger

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

TickCallback = Callable[[datetime], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(UTC)


def local_now(tz: tzinfo) -> datetime:
    """Current instant in the display timezone."""
    return utc_now().astimezone(tz)


class Ticker:
    """Periodic sampler of the current instant.

    Every ``interval`` seconds the ticker samples ``now()`` and awaits
    ``callback(instant)`` before sleeping again, so ticks of one ticker never
    overlap. The first tick fires one interval after ``start()``.

    A failing callback is logged and the loop keeps going; ``stop()`` cancels
    the loop and waits for it to finish.

    Example:
        ticker = Ticker(10, session.tick, name="reminders")
        ticker.start()
        ...
        await ticker.stop()
    """

    def __init__(
        self,
        interval: float,
        callback: TickCallback,
        *,
        now: Callable[[], datetime] = utc_now,
        name: str = "ticker",
    ) -> None:
        if interval <= 0:
            msg = f"Ticker interval must be positive, got {interval}"
            raise ValueError(msg)
        self.interval = interval
        self.name = name
        self._callback = callback
        self._now = now
        self._task: asyncio.Task[None] | None = None
        self._current = now()

    @property
    def current(self) -> datetime:
        """The last sampled instant."""
        return self._current

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sample(self) -> datetime:
        """Sample the clock now, outside the regular cadence."""
        self._current = self._now()
        return self._current

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"ticker:{self.name}")
        lazy_logger.debug(lambda: f"ticker {self.name} started (every {self.interval}s)")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        lazy_logger.debug(lambda: f"ticker {self.name} stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            instant = self.sample()
            try:
                await self._callback(instant)
            except Exception:
                logger.exception(
                    "Tick callback failed",
                    extra={"ticker": self.name, "operation": "clock.tick"},
                )
