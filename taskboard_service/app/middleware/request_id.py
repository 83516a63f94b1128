"""Request ID middleware.

Reads ``X-Request-ID`` or generates a UUID, stores it in
``request.state.request_id`` and the logging context, and echoes it on the
response. WebSocket connections get an id too, so every log line of a
mounted reminder session carries it; there is no response header to echo.

Task change events published during the request carry the id as their
correlation id.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.datastructures import Headers, MutableHeaders

from taskboard_service.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

HEADER_NAME = "x-request-id"


class RequestIDMiddleware:
    """Pure ASGI middleware; lifespan scopes pass through untouched.

    Usage:
        app = FastAPI()
        app.add_middleware(RequestIDMiddleware)
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(HEADER_NAME) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        set_log_context(request_id=request_id)

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message).append(HEADER_NAME, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            clear_log_context()
