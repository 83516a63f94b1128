"""Change feed dependencies for FastAPI route handlers.

Usage:
    @router.post("/tasks/")
    async def create_task(feed: OptionalChangeFeed):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from taskboard_service.core.exceptions import ServiceUnavailableException


def get_feed() -> ChangeFeed | None:
    """Get the change feed instance.

    The infra getter raises RuntimeError when the feed has not been
    started; this dependency returns None instead so mutations still work
    without live updates.
    """
    from taskboard_service.infra.realtime import get_change_feed

    try:
        return get_change_feed()
    except RuntimeError:
        return None


async def require_change_feed(
    feed: Annotated[ChangeFeed | None, Depends(get_feed)],
) -> ChangeFeed:
    """Dependency that requires the change feed to be running.

    Raises:
        ServiceUnavailableException: 503 if the feed is not available
    """
    if feed is None or feed.closed:
        raise ServiceUnavailableException(
            detail="Change feed is not available",
            type="change-feed-unavailable",
        )
    return feed


async def optional_change_feed(
    feed: Annotated[ChangeFeed | None, Depends(get_feed)],
) -> ChangeFeed | None:
    return feed


from taskboard_service.infra.realtime import ChangeFeed  # noqa: E402

ChangeFeedDep = Annotated[ChangeFeed, Depends(require_change_feed)]
OptionalChangeFeed = Annotated[ChangeFeed | None, Depends(optional_change_feed)]
