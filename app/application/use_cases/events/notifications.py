"""Relay notification lifecycle events raised by peer processes.

Each process pushes its own changes to the websockets it holds through the
engine observers and the in-app adapter. Events carrying this process'
``origin`` are therefore ignored here.
"""

from __future__ import annotations

import logging

from app.domain.topics import (
    NOTIFICATION_ALL_READ,
    NOTIFICATION_DELIVERED,
    NOTIFICATION_READ,
    NOTIFICATION_REALTIME,
)

from .context import EventHandlerContext, TopicHandler
from .schemas import NotificationRelayEvent, NotificationsAllReadEvent

logger = logging.getLogger(__name__)


def _is_local(context: EventHandlerContext, origin: str | None) -> bool:
    return context.realtime is None or origin == context.instance_id


async def handle_notification_realtime(
    context: EventHandlerContext, event: NotificationRelayEvent
) -> None:
    if _is_local(context, event.origin):
        return
    pushed = await context.realtime.push_notification(event.user_id, event.notification)
    logger.debug(
        "Relayed notification %s to %s local connections", event.notification_id, pushed
    )


async def handle_notification_read(
    context: EventHandlerContext, event: NotificationRelayEvent
) -> None:
    if _is_local(context, event.origin):
        return
    await context.realtime.push_read(
        event.user_id, event.notification_id, event.notification.get("read_at")
    )


async def handle_notification_delivered(
    context: EventHandlerContext, event: NotificationRelayEvent
) -> None:
    if _is_local(context, event.origin):
        return
    await context.realtime.push_delivered(
        event.user_id,
        event.notification_id,
        event.notification.get("status", "delivered"),
    )


async def handle_notifications_all_read(
    context: EventHandlerContext, event: NotificationsAllReadEvent
) -> None:
    if _is_local(context, event.origin):
        return
    await context.realtime.push_all_read(event.user_id, event.count)


HANDLERS: dict[str, TopicHandler] = {
    NOTIFICATION_REALTIME: TopicHandler(NotificationRelayEvent, handle_notification_realtime),
    NOTIFICATION_READ: TopicHandler(NotificationRelayEvent, handle_notification_read),
    NOTIFICATION_DELIVERED: TopicHandler(NotificationRelayEvent, handle_notification_delivered),
    NOTIFICATION_ALL_READ: TopicHandler(NotificationsAllReadEvent, handle_notifications_all_read),
}


__all__ = [
    "HANDLERS",
    "handle_notification_delivered",
    "handle_notification_read",
    "handle_notification_realtime",
    "handle_notifications_all_read",
]
