"""In-app delivery: push notifications to websocket subscribers."""

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import uuid4

from app.application.use_cases.notifications.ports import EventBus
from app.domain.entities import CHANNEL_IN_APP, DeliveryResult, Notification
from app.domain.exceptions import TransientBusError
from app.domain.topics import NOTIFICATION_REALTIME
from app.utils import now_in_app_timezone

from .manager import NotificationConnectionManager

logger = logging.getLogger(__name__)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket frame for ``notification``."""

    return {"type": "notification", "data": notification.to_payload()}


class NotificationPublisher:
    """Serialize notifications and send them to the local connections of a user."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    async def push(self, notification: Notification) -> int:
        return await self._manager.send_to_user(
            notification.user_id, serialize_notification(notification)
        )


class InAppDeliveryAdapter:
    """Local emission of a notification to the user's open clients.

    The notification is pushed to websockets held by this process and relayed
    on the bus so peer processes can push it to theirs. The attempt always
    counts as delivered: the record itself is what the client lists.
    """

    channel = CHANNEL_IN_APP

    def __init__(
        self,
        publisher: NotificationPublisher,
        *,
        bus: EventBus | None = None,
        origin: str | None = None,
        clock: Callable[[], Any] = now_in_app_timezone,
    ) -> None:
        self._publisher = publisher
        self._bus = bus
        self._origin = origin
        self._clock = clock

    async def deliver(self, notification: Notification) -> DeliveryResult:
        local_connections = await self._publisher.push(notification)
        if self._bus is not None:
            try:
                await self._bus.publish(
                    NOTIFICATION_REALTIME,
                    {
                        "eventId": uuid4().hex,
                        "origin": self._origin,
                        "notificationId": notification.id,
                        "userId": notification.user_id,
                        "notification": notification.to_payload(),
                    },
                )
            except TransientBusError as exc:
                logger.warning(
                    "Could not relay notification %s to peers: %s", notification.id, exc
                )
        return DeliveryResult.ok(
            self.channel,
            delivered_at=self._clock().isoformat(),
            local_connections=local_connections,
        )


__all__ = [
    "InAppDeliveryAdapter",
    "NotificationPublisher",
    "serialize_notification",
]
