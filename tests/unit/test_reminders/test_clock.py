"""Unit tests for clock helpers and the periodic ticker."""

from __future__ import annotations

import asyncio
from datetime import UTC, timedelta, timezone

import pytest

from taskboard_service.features.reminders.clock import Ticker, local_now, utc_now
from tests.utils import FIXED_NOW, wait_until


def test_utc_now_is_aware():
    assert utc_now().tzinfo is UTC


def test_local_now_uses_timezone():
    tz = timezone(timedelta(hours=2))

    assert local_now(tz).utcoffset() == timedelta(hours=2)


def test_interval_must_be_positive():
    async def callback(_now):
        return None

    with pytest.raises(ValueError, match="positive"):
        Ticker(0, callback)


async def test_sample_updates_current():
    instants = iter([FIXED_NOW, FIXED_NOW + timedelta(seconds=10)])

    async def callback(_now):
        return None

    ticker = Ticker(60, callback, now=lambda: next(instants))

    assert ticker.current == FIXED_NOW
    assert ticker.sample() == FIXED_NOW + timedelta(seconds=10)
    assert ticker.current == FIXED_NOW + timedelta(seconds=10)


async def test_ticker_invokes_callback_until_stopped():
    seen = []

    async def callback(now):
        seen.append(now)

    ticker = Ticker(0.01, callback)
    ticker.start()
    assert ticker.running

    await wait_until(lambda: len(seen) >= 3)
    await ticker.stop()
    count = len(seen)
    await asyncio.sleep(0.05)

    assert not ticker.running
    assert len(seen) == count
    assert seen == sorted(seen)


async def test_failing_callback_does_not_stop_ticker():
    calls = []

    async def callback(now):
        calls.append(now)
        if len(calls) == 1:
            raise RuntimeError("boom")

    ticker = Ticker(0.01, callback)
    ticker.start()
    try:
        await wait_until(lambda: len(calls) >= 3)
    finally:
        await ticker.stop()


async def test_stop_without_start_is_noop():
    async def callback(_now):
        return None

    await Ticker(1, callback).stop()
