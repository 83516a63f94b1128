"""API router for the reminders feature.

REST endpoints act on the caller's mounted view session; the WebSocket
endpoint mounts a session for the lifetime of the connection and pushes
bell and table state as it changes.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from taskboard_service.core.dependencies import AuthUserDep, IdentityProviderDep, authenticate
from taskboard_service.core.dependencies.reminders import ReminderManagerDep, get_session_manager
from taskboard_service.core.exceptions import AppException, NotFoundException, ValidationException
from taskboard_service.core.schemas.problem_details import ProblemDetails
from taskboard_service.features.reminders.manager import ReminderSessionManager
from taskboard_service.features.reminders.schemas import (
    BellState,
    ClearResult,
    ClientMessageType,
    ErrorMessage,
    PushMessage,
    ServerMessage,
    ServerMessageType,
    SessionInfo,
)
from taskboard_service.features.reminders.session import ReminderSession
from taskboard_service.features.taskview.schemas import FilterUpdate, TaskTableView
from taskboard_service.features.taskview.sorting import SortColumn
from taskboard_service.infra.logging import get_lazy_logger
from taskboard_service.infra.logging.context import set_log_context

router = APIRouter(prefix="/reminders", tags=["reminders"])

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)

_NOT_MOUNTED = {404: {"model": ProblemDetails, "description": "No view session mounted"}}


async def get_mounted_session(user: AuthUserDep, manager: ReminderManagerDep) -> ReminderSession:
    """The caller's view session.

    Raises:
        NotFoundException: The user has no mounted view.
    """
    session = manager.get(user.user_id)
    if session is None:
        raise NotFoundException(
            detail="No view session mounted",
            type="session-not-mounted",
            extra={"user_id": user.user_id},
        )
    return session


MountedSession = Annotated[ReminderSession, Depends(get_mounted_session)]


def _session_info(manager: ReminderSessionManager, session: ReminderSession) -> SessionInfo:
    return SessionInfo(
        user_id=session.user_id,
        mounts=manager.mounts(session.user_id),
        task_count=len(session.tasks),
        ledger_size=len(session.ledger),
        notification_permission=str(session.notifier.permission),
        live_updates=session.live_updates,
        bell=session.bell_state(),
    )


# ──────────────────────────────────────────────────────────────
# Session mount
# ──────────────────────────────────────────────────────────────


@router.post(
    "/session",
    response_model=SessionInfo,
    summary="Mount view session",
    description="Start (or join) the caller's view session: loads tasks and starts the reminder timers.",
)
async def mount_session(user: AuthUserDep, manager: ReminderManagerDep) -> SessionInfo:
    session = await manager.acquire(user.user_id)
    return _session_info(manager, session)


@router.get("/session", response_model=SessionInfo, summary="Get view session", responses=_NOT_MOUNTED)
async def get_session(session: MountedSession, manager: ReminderManagerDep) -> SessionInfo:
    return _session_info(manager, session)


@router.delete(
    "/session",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Dismount view session",
    description="Release one mount; the session stops when its last mount is released.",
    responses=_NOT_MOUNTED,
)
async def dismount_session(user: AuthUserDep, manager: ReminderManagerDep) -> Response:
    if not await manager.release(user.user_id):
        raise NotFoundException(detail="No view session mounted", type="session-not-mounted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ──────────────────────────────────────────────────────────────
# Bell
# ──────────────────────────────────────────────────────────────


@router.get("/bell", response_model=BellState, summary="Bell state", responses=_NOT_MOUNTED)
async def get_bell(session: MountedSession) -> BellState:
    return session.bell_state()


@router.post(
    "/bell/open",
    response_model=BellState,
    summary="Open notification dropdown",
    description="Mark every notification read and return the bell state.",
    responses=_NOT_MOUNTED,
)
async def open_bell(session: MountedSession) -> BellState:
    return await session.open_dropdown()


@router.delete(
    "/notifications/{notification_id}",
    response_model=BellState,
    summary="Dismiss notification",
    description="Remove one notification. Unknown ids are ignored.",
    responses=_NOT_MOUNTED,
)
async def dismiss_notification(notification_id: str, session: MountedSession) -> BellState:
    await session.dismiss(notification_id)
    return session.bell_state()


@router.delete(
    "/notifications",
    response_model=ClearResult,
    summary="Clear all notifications",
    responses=_NOT_MOUNTED,
)
async def clear_notifications(session: MountedSession) -> ClearResult:
    return ClearResult(removed=await session.clear_all())


# ──────────────────────────────────────────────────────────────
# Table
# ──────────────────────────────────────────────────────────────


@router.get("/session/view", response_model=TaskTableView, summary="Session task table", responses=_NOT_MOUNTED)
async def get_session_view(session: MountedSession) -> TaskTableView:
    return session.table()


@router.put(
    "/session/view/filters",
    response_model=TaskTableView,
    summary="Set table filters",
    responses=_NOT_MOUNTED,
)
async def set_session_filters(payload: FilterUpdate, session: MountedSession) -> TaskTableView:
    try:
        filters = payload.to_filters()
    except ValidationError as exc:
        raise ValidationException(
            detail="Invalid filter values",
            extra={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
    return await session.set_filters(filters)


@router.delete(
    "/session/view/filters",
    response_model=TaskTableView,
    summary="Clear table filters",
    responses=_NOT_MOUNTED,
)
async def clear_session_filters(session: MountedSession) -> TaskTableView:
    return await session.clear_filters()


@router.post(
    "/session/view/filters/categories/{name}",
    response_model=TaskTableView,
    summary="Toggle category filter",
    description="Add the category to the active filter, or remove it when already selected.",
    responses=_NOT_MOUNTED,
)
async def toggle_session_category(name: str, session: MountedSession) -> TaskTableView:
    return await session.toggle_category(name)


@router.post(
    "/session/view/sort/{column}",
    response_model=TaskTableView,
    summary="Toggle table sort",
    description="Same column while ascending flips to descending; any other click sorts ascending.",
    responses=_NOT_MOUNTED,
)
async def toggle_session_sort(column: SortColumn, session: MountedSession) -> TaskTableView:
    await session.toggle_sort(column)
    return session.table()


# ──────────────────────────────────────────────────────────────
# WebSocket
# ──────────────────────────────────────────────────────────────


@router.websocket("/ws")
async def reminders_websocket(
    websocket: WebSocket,
    provider: IdentityProviderDep,
    manager: Annotated[ReminderSessionManager | None, Depends(get_session_manager)],
    token: Annotated[str | None, Query(description="Session token")] = None,
) -> None:
    """Mount a view session for the lifetime of the connection.

    Message Protocol:
        Client → Server:
        - {"type": "ping"}
        - {"type": "bell"} / {"type": "table"}
        - {"type": "open"}
        - {"type": "dismiss", "id": "..."}
        - {"type": "clear"}
        - {"type": "sort", "column": "deadline"}
        - {"type": "filters", "categories": [...], "deadline": "...", "completion": "..."}
        - {"type": "toggle_category", "category": "Work"}

        Server → Client:
        - {"type": "connected", "data": {"user_id": "..."}}
        - {"type": "bell", "data": {...}} on every reminder tick and bell action
        - {"type": "table", "data": {...}} on every table tick and task change
        - {"type": "pong"}
        - {"type": "error", "code": "...", "message": "..."}
    """
    if manager is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason="Server not ready")
        return
    try:
        user = await authenticate(provider, token)
    except AppException as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.detail)
        return

    await websocket.accept()
    send_lock = asyncio.Lock()

    async def send(message: ServerMessage) -> None:
        async with send_lock:
            await websocket.send_json(message.model_dump(mode="json"))

    async def push(kind: str, payload: dict[str, Any]) -> None:
        await send(PushMessage(type=ServerMessageType(kind), data=payload))

    session: ReminderSession | None = None
    try:
        session = await manager.acquire(user.user_id)
        set_log_context(user_id=user.user_id)
        session.add_listener(push)
        await send(PushMessage(type=ServerMessageType.CONNECTED, data={"user_id": user.user_id}))
        await push("bell", session.bell_state().model_dump(mode="json"))
        await push("table", session.table().model_dump(mode="json"))
        logger.info("Reminder WebSocket connected", extra={"user_id": user.user_id})

        await _handle_messages(websocket, session, send, push)

    except WebSocketDisconnect:
        lazy_logger.debug(lambda: f"reminder websocket for {user.user_id} disconnected")

    except Exception as e:
        logger.exception("Reminder WebSocket error", extra={"user_id": user.user_id, "error": str(e)})

    finally:
        if session is not None:
            session.remove_listener(push)
            await manager.release(user.user_id)


async def _handle_messages(websocket: WebSocket, session: ReminderSession, send, push) -> None:
    """Handle incoming WebSocket messages."""
    async for raw_message in websocket.iter_text():
        try:
            message = json.loads(raw_message)
            msg_type = message.get("type")

            if msg_type == ClientMessageType.PING:
                await send(ServerMessage(type=ServerMessageType.PONG))

            elif msg_type == ClientMessageType.BELL:
                await push("bell", session.bell_state().model_dump(mode="json"))

            elif msg_type == ClientMessageType.OPEN:
                state = await session.open_dropdown()
                await push("bell", state.model_dump(mode="json"))

            elif msg_type == ClientMessageType.DISMISS:
                await session.dismiss(str(message.get("id", "")))
                await push("bell", session.bell_state().model_dump(mode="json"))

            elif msg_type == ClientMessageType.CLEAR:
                await session.clear_all()
                await push("bell", session.bell_state().model_dump(mode="json"))

            elif msg_type == ClientMessageType.TABLE:
                await push("table", session.table().model_dump(mode="json"))

            elif msg_type == ClientMessageType.SORT:
                await session.toggle_sort(SortColumn(message.get("column")))
                await push("table", session.table().model_dump(mode="json"))

            elif msg_type == ClientMessageType.FILTERS:
                update = FilterUpdate.model_validate({k: v for k, v in message.items() if k != "type"})
                view = await session.set_filters(update.to_filters())
                await push("table", view.model_dump(mode="json"))

            elif msg_type == ClientMessageType.TOGGLE_CATEGORY:
                name = message.get("category")
                if not isinstance(name, str) or not name:
                    raise ValueError("toggle_category requires a category name")
                view = await session.toggle_category(name)
                await push("table", view.model_dump(mode="json"))

            else:
                await send(ErrorMessage(code="unknown_type", message=f"Unknown message type: {msg_type}"))

        except json.JSONDecodeError:
            await send(ErrorMessage(code="invalid_json", message="Invalid JSON message"))

        except (ValueError, AttributeError) as e:
            # ValidationError is a ValueError
            await send(ErrorMessage(code="invalid_message", message=str(e)))
