"""Lifecycle hooks invoked by the engine after state changes are stored."""

from __future__ import annotations

from typing import Protocol

from app.domain.entities import Notification


class NotificationLifecycleObserver(Protocol):
    """In-process listener for committed notification state changes.

    Hooks run in registration order before the matching bus event is
    published. Exceptions raised by a hook are logged by the engine and do
    not affect other observers.
    """

    async def on_created(self, notification: Notification) -> None: ...

    async def on_read(self, notification: Notification) -> None: ...

    async def on_delivered(self, notification: Notification) -> None: ...

    async def on_all_read(self, user_id: str, count: int) -> None: ...


class BaseLifecycleObserver:
    """No-op observer meant to be subclassed for the hooks a listener needs."""

    async def on_created(self, notification: Notification) -> None:
        return None

    async def on_read(self, notification: Notification) -> None:
        return None

    async def on_delivered(self, notification: Notification) -> None:
        return None

    async def on_all_read(self, user_id: str, count: int) -> None:
        return None


__all__ = ["BaseLifecycleObserver", "NotificationLifecycleObserver"]
