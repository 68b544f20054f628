"""Websocket handler for realtime notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as FrameValidationError

from app.application.use_cases.notifications import NotificationEngine, ensure_owner
from app.domain.exceptions import NotFoundError, NotificationPermissionError
from app.infrastructure.notifications import serialize_notification
from app.interfaces.api.dependencies import get_container, resolve_user_id
from app.interfaces.api.schemas import NotificationClientFrame

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

INIT_FRAME_LIMIT = 50


async def _apply(
    engine: NotificationEngine, frame: NotificationClientFrame, user_id: str
) -> int:
    """Mark the notifications listed in ``frame`` as read or delivered."""

    applied = 0
    for notification_id in frame.unique_ids():
        try:
            notification = ensure_owner(await engine.get_by_id(notification_id), user_id)
            if frame.type == "ack":
                await engine.mark_read(notification.id, user_id)
            else:
                await engine.mark_delivered(notification.id, user_id)
        except (NotFoundError, NotificationPermissionError) as exc:
            logger.info("Ignoring %s for notification %s: %s", frame.type, notification_id, exc)
            continue
        applied += 1
    return applied


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    try:
        user_id = resolve_user_id(websocket.query_params.get("token"))
        container = get_container(websocket)
    except HTTPException as exc:
        code = (
            status.WS_1008_POLICY_VIOLATION
            if exc.status_code == status.HTTP_401_UNAUTHORIZED
            else status.WS_1011_INTERNAL_ERROR
        )
        await websocket.close(code=code)
        return

    try:
        pending_notifications = await container.notifications.list_unread(
            user_id, limit=INIT_FRAME_LIMIT
        )
    except Exception:
        logger.exception("Could not load unread notifications for %s", user_id)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    manager = container.manager
    engine = container.engine
    await manager.connect(user_id, websocket)
    try:
        await websocket.send_json(
            {
                "type": "init",
                "data": [serialize_notification(n)["data"] for n in pending_notifications],
            }
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            try:
                frame = NotificationClientFrame.model_validate(message)
            except FrameValidationError:
                logger.debug("Ignoring unexpected websocket frame from %s", user_id)
                continue

            if frame.type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            await _apply(engine, frame, user_id)
    except WebSocketDisconnect:
        manager.disconnect(user_id, websocket)
    except Exception:
        manager.disconnect(user_id, websocket)
        raise


__all__ = ["router"]
