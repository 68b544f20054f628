"""Shared collaborators handed to every domain event handler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, NamedTuple, Protocol

from pydantic import BaseModel

from app.application.use_cases.notifications.engine import NotificationEngine
from app.application.use_cases.notifications.ports import (
    EventBus,
    ProviderCache,
    ServicesPlanStore,
)
from app.domain.entities import (
    MESSAGE_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    DeliveryResult,
    Notification,
    NotificationRequest,
)


class RealtimeRelay(Protocol):
    """Push relayed lifecycle events to the websockets held by this process."""

    async def push_notification(self, user_id: str, payload: dict[str, Any]) -> int: ...

    async def push_read(
        self, user_id: str, notification_id: str, read_at: str | None
    ) -> int: ...

    async def push_delivered(self, user_id: str, notification_id: str, status: str) -> int: ...

    async def push_all_read(self, user_id: str, count: int) -> int: ...


@dataclass
class EventHandlerContext:
    engine: NotificationEngine
    bus: EventBus | None = None
    services_plans: ServicesPlanStore | None = None
    provider_cache: ProviderCache | None = None
    realtime: RealtimeRelay | None = None

    @property
    def instance_id(self) -> str:
        return self.engine.instance_id

    async def notify(self, request: NotificationRequest) -> Notification:
        """Create and deliver ``request`` through the engine."""

        notification, _ = await self.engine.dispatch(request)
        return notification

    async def send_direct(self, request: NotificationRequest) -> list[DeliveryResult]:
        """Deliver ``request`` without keeping a record of it."""

        return await self.engine.send_direct(request)


def clip(text: str, limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, ending with an ellipsis when cut."""

    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def build_request(
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    *,
    priority: str | None = None,
    channels: list[str] | None = None,
    data: dict[str, Any] | None = None,
) -> NotificationRequest:
    return NotificationRequest(
        user_id=user_id,
        type=notification_type,
        title=clip(title, TITLE_MAX_LENGTH),
        message=clip(message, MESSAGE_MAX_LENGTH),
        priority=priority,
        channels=channels,
        data=data,
    )


class TopicHandler(NamedTuple):
    model: type[BaseModel]
    handle: Callable[[EventHandlerContext, Any], Awaitable[None]]


__all__ = [
    "EventHandlerContext",
    "RealtimeRelay",
    "TopicHandler",
    "build_request",
    "clip",
]
