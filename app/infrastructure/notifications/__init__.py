"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    InAppDeliveryAdapter,
    NotificationPublisher,
    serialize_notification,
)
from .realtime import (
    RealtimeEventPublisher,
    RealtimeSyncObserver,
)

__all__ = [
    "InAppDeliveryAdapter",
    "NotificationConnectionManager",
    "NotificationPublisher",
    "RealtimeEventPublisher",
    "RealtimeSyncObserver",
    "notification_manager",
    "serialize_notification",
]
