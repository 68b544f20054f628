"""Broadcast read and delivery state changes to connected clients."""

from __future__ import annotations

import copy
import logging
from typing import Any

from app.application.use_cases.notifications.observers import BaseLifecycleObserver
from app.domain.entities import Notification

from .manager import NotificationConnectionManager

logger = logging.getLogger(__name__)

EVENT_NOTIFICATION = "notification"
EVENT_NOTIFICATION_READ = "notification.read"
EVENT_NOTIFICATION_DELIVERED = "notification.delivered"
EVENT_NOTIFICATION_ALL_READ = "notification.all_read"


class RealtimeEventPublisher:
    """Dispatch structured realtime events to websocket subscribers."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    async def dispatch(self, user_id: str, *, event_type: str, payload: Any) -> int:
        """Send an ``event_type`` frame to every connection of ``user_id``."""

        if not user_id:
            return 0
        message = {"type": event_type, "data": copy.deepcopy(payload)}
        return await self._manager.send_to_user(user_id, message)

    async def push_notification(self, user_id: str, payload: dict[str, Any]) -> int:
        return await self.dispatch(user_id, event_type=EVENT_NOTIFICATION, payload=payload)

    async def push_read(self, user_id: str, notification_id: str, read_at: str | None) -> int:
        return await self.dispatch(
            user_id,
            event_type=EVENT_NOTIFICATION_READ,
            payload={"id": notification_id, "read_at": read_at},
        )

    async def push_delivered(self, user_id: str, notification_id: str, status: str) -> int:
        return await self.dispatch(
            user_id,
            event_type=EVENT_NOTIFICATION_DELIVERED,
            payload={"id": notification_id, "status": status},
        )

    async def push_all_read(self, user_id: str, count: int) -> int:
        return await self.dispatch(
            user_id, event_type=EVENT_NOTIFICATION_ALL_READ, payload={"count": count}
        )


class RealtimeSyncObserver(BaseLifecycleObserver):
    """Keep every open client of a user in sync with read/delivered changes."""

    def __init__(self, publisher: RealtimeEventPublisher) -> None:
        self._publisher = publisher

    async def on_read(self, notification: Notification) -> None:
        await self._publisher.push_read(
            notification.user_id,
            notification.id,
            notification.read_at.isoformat() if notification.read_at else None,
        )

    async def on_delivered(self, notification: Notification) -> None:
        await self._publisher.push_delivered(
            notification.user_id, notification.id, notification.status
        )

    async def on_all_read(self, user_id: str, count: int) -> None:
        await self._publisher.push_all_read(user_id, count)


__all__ = [
    "EVENT_NOTIFICATION",
    "EVENT_NOTIFICATION_ALL_READ",
    "EVENT_NOTIFICATION_DELIVERED",
    "EVENT_NOTIFICATION_READ",
    "RealtimeEventPublisher",
    "RealtimeSyncObserver",
]
