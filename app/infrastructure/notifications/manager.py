"""Registry of the notification websockets held by this process."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Websockets keyed by the authenticated user id.

    A socket whose send fails is treated as closed and forgotten, so the
    number returned by :meth:`send_to_user` counts live receivers only.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, list[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        sockets = self._sockets.setdefault(user_id, [])
        if websocket not in sockets:
            sockets.append(websocket)
        logger.debug("Websocket opened for user %s (%s open)", user_id, len(sockets))

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id)
        if not sockets:
            return
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            del self._sockets[user_id]

    def connection_count(self, user_id: str) -> int:
        return len(self._sockets.get(user_id, ()))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Push ``message`` to all sockets of ``user_id`` at once."""

        sockets = tuple(self._sockets.get(user_id, ()))
        if not sockets:
            return 0
        outcomes = await asyncio.gather(
            *(socket.send_json(message) for socket in sockets), return_exceptions=True
        )
        delivered = 0
        for socket, outcome in zip(sockets, outcomes):
            if isinstance(outcome, BaseException):
                logger.debug("Dropping websocket for user %s: %s", user_id, outcome)
                self.disconnect(user_id, socket)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
