"""Collaborator interfaces consumed by the notification engine."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Protocol

from app.domain.entities import (
    DeliveryResult,
    Notification,
    NotificationFilters,
    NotificationPreferences,
    NotificationStats,
    PaginatedResult,
    ServicesPlan,
    UserContact,
)

EventHandler = Callable[[str], Awaitable[None]]


class NotificationStore(Protocol):
    async def create(self, notification: Notification) -> Notification: ...

    async def find_by_id(self, notification_id: str) -> Notification | None: ...

    async def find_by_user(
        self,
        user_id: str,
        filters: NotificationFilters,
        *,
        page: int,
        limit: int,
    ) -> PaginatedResult: ...

    async def transition(
        self,
        notification_id: str,
        status: str,
        *,
        from_statuses: Iterable[str],
        sent_at: datetime | None = None,
        read_at: datetime | None = None,
    ) -> Notification | None: ...

    async def delete(self, notification_id: str) -> bool: ...

    async def mark_all_read(self, user_id: str, *, read_at: datetime) -> int: ...

    async def get_stats(self, user_id: str) -> NotificationStats: ...


class PreferencesStore(Protocol):
    async def find_by_user(self, user_id: str) -> NotificationPreferences | None: ...

    async def create(self, preferences: NotificationPreferences) -> NotificationPreferences: ...

    async def update(self, preferences: NotificationPreferences) -> NotificationPreferences: ...


class ServicesPlanStore(Protocol):
    async def find_by_id(self, plan_id: str) -> ServicesPlan | None: ...

    async def list_by_care_plan(self, care_plan_id: str) -> list[ServicesPlan]: ...

    async def update_status(self, plan_id: str, status: str) -> ServicesPlan: ...


class ContactDirectory(Protocol):
    async def get_contact(self, user_id: str) -> UserContact | None: ...


class DeliveryAdapter(Protocol):
    """Channel sender; returns a result instead of raising on failure."""

    channel: str

    async def deliver(self, notification: Notification) -> DeliveryResult: ...


class EventBus(Protocol):
    """Pub/sub transport with at-least-once, unordered delivery."""

    async def publish(self, topic: str, payload: dict[str, Any]) -> None: ...

    async def subscribe(self, topic: str, handler: EventHandler) -> None: ...


class ProviderCache(Protocol):
    async def invalidate_provider(self, provider_id: str) -> None: ...


__all__ = [
    "ContactDirectory",
    "DeliveryAdapter",
    "EventBus",
    "EventHandler",
    "NotificationStore",
    "PreferencesStore",
    "ProviderCache",
    "ServicesPlanStore",
]
