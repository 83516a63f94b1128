"""Realtime infrastructure: in-process change feed."""

from .feed import (
    ChangeFeed,
    ChangeFeedClosedError,
    Subscription,
    get_change_feed,
    start_change_feed,
    stop_change_feed,
)

__all__ = [
    "ChangeFeed",
    "ChangeFeedClosedError",
    "Subscription",
    "get_change_feed",
    "start_change_feed",
    "stop_change_feed",
]
