"""Notification engine: creation, queries, preferences and channel fan-out."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping
from uuid import uuid4

from app.domain.entities import (
    CATEGORIES,
    CHANNEL_IN_APP,
    DEFAULT_PAGE_LIMIT,
    PRIORITIES,
    STATUS_DELIVERED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_READ,
    STATUS_SENT,
    DeliveryResult,
    Notification,
    NotificationFilters,
    NotificationPreferences,
    NotificationRequest,
    NotificationStats,
    PaginatedResult,
    category_for_type,
    default_preferences,
    default_priority_for_type,
    normalize_channels,
    statuses_leading_to,
)
from app.domain.exceptions import (
    NotFoundError,
    NotificationPermissionError,
    TransientBusError,
    ValidationError,
)
from app.domain.topics import (
    NOTIFICATION_ALL_READ,
    NOTIFICATION_CREATED,
    NOTIFICATION_DELIVERED,
    NOTIFICATION_READ,
)
from app.utils import now_in_app_timezone

from .eligibility import eligible_channels
from .observers import NotificationLifecycleObserver
from .ports import DeliveryAdapter, EventBus, NotificationStore, PreferencesStore
from .preferences_cache import PreferencesCache
from .validators import (
    ensure_valid_filters,
    ensure_valid_page,
    ensure_valid_preferences_update,
    ensure_valid_request,
)

logger = logging.getLogger(__name__)


def ensure_owner(notification: Notification, user_id: str) -> Notification:
    """Raise ``NotificationPermissionError`` unless ``user_id`` owns ``notification``."""

    if notification.user_id != user_id:
        raise NotificationPermissionError(
            f"User {user_id} cannot access notification {notification.id}"
        )
    return notification


class NotificationEngine:
    """Create notifications, evaluate channel eligibility and deliver them.

    Every collaborator is injected so a fresh engine can be built per test or
    per process. State changes are stored first, then lifecycle observers run,
    then the matching bus event is published.
    """

    def __init__(
        self,
        *,
        notifications: NotificationStore,
        preferences: PreferencesStore,
        bus: EventBus | None = None,
        adapters: Iterable[DeliveryAdapter] = (),
        preferences_cache: PreferencesCache | None = None,
        observers: Iterable[NotificationLifecycleObserver] = (),
        clock: Callable[[], datetime] = now_in_app_timezone,
        instance_id: str | None = None,
    ) -> None:
        self._notifications = notifications
        self._preferences = preferences
        self._bus = bus
        self._adapters: dict[str, DeliveryAdapter] = {
            adapter.channel: adapter for adapter in adapters
        }
        self._cache = preferences_cache or PreferencesCache()
        self._observers: list[NotificationLifecycleObserver] = list(observers)
        self._clock = clock
        self._instance_id = instance_id or uuid4().hex

    @property
    def instance_id(self) -> str:
        """Identifier stamped as ``origin`` on every lifecycle event."""

        return self._instance_id

    @property
    def preferences_cache(self) -> PreferencesCache:
        return self._cache

    def add_observer(self, observer: NotificationLifecycleObserver) -> None:
        self._observers.append(observer)

    # Notifications -----------------------------------------------------------

    async def create(self, request: NotificationRequest) -> Notification:
        """Validate ``request``, persist the notification and announce it."""

        request = ensure_valid_request(request)
        notification = Notification(
            id=uuid4().hex,
            user_id=request.user_id,
            type=request.type,
            category=request.category or category_for_type(request.type),
            priority=request.priority or default_priority_for_type(request.type),
            title=request.title,
            message=request.message,
            data=request.data,
            channels=normalize_channels(request.channels),
            status=STATUS_PENDING,
            created_at=self._clock(),
        )
        saved = await self._notifications.create(notification)
        logger.info(
            "Created %s notification %s for user %s", saved.type, saved.id, saved.user_id
        )
        await self._notify_observers("on_created", saved)
        await self._publish(NOTIFICATION_CREATED, self._lifecycle_payload(saved))
        return saved

    async def list_for_user(
        self,
        user_id: str,
        filters: NotificationFilters | None = None,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> PaginatedResult:
        """Return one page of ``user_id``'s notifications, newest first."""

        if not user_id:
            raise ValidationError("user_id is required")
        filters = ensure_valid_filters(filters)
        page, limit = ensure_valid_page(page, limit)
        return await self._notifications.find_by_user(
            user_id, filters, page=page, limit=limit
        )

    async def get_by_id(self, notification_id: str) -> Notification:
        notification = await self._notifications.find_by_id(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        return notification

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark a notification as read.

        Ownership must be checked by the caller (see :func:`ensure_owner`).
        Notifications already read or failed are returned unchanged.
        """

        notification = await self.get_by_id(notification_id)
        if notification.is_terminal:
            return notification
        saved = await self._notifications.transition(
            notification_id,
            STATUS_READ,
            from_statuses=statuses_leading_to(STATUS_READ),
            read_at=self._clock(),
        )
        if saved is None:
            return await self.get_by_id(notification_id)
        logger.info("Notification %s marked as read by %s", saved.id, user_id)
        await self._notify_observers("on_read", saved)
        await self._publish(NOTIFICATION_READ, self._lifecycle_payload(saved))
        return saved

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of ``user_id`` as read."""

        if not user_id:
            raise ValidationError("user_id is required")
        read_at = self._clock()
        count = await self._notifications.mark_all_read(user_id, read_at=read_at)
        if count:
            logger.info("Marked %s notifications as read for user %s", count, user_id)
            await self._notify_observers("on_all_read", user_id, count)
            await self._publish(
                NOTIFICATION_ALL_READ,
                {
                    "eventId": uuid4().hex,
                    "origin": self._instance_id,
                    "userId": user_id,
                    "count": count,
                    "readAt": read_at.isoformat(),
                },
            )
        return count

    async def mark_delivered(self, notification_id: str, user_id: str) -> Notification:
        """Record that a client received the notification."""

        notification = await self.get_by_id(notification_id)
        if not notification.can_transition(STATUS_DELIVERED):
            return notification
        saved = await self._notifications.transition(
            notification_id,
            STATUS_DELIVERED,
            from_statuses=statuses_leading_to(STATUS_DELIVERED),
        )
        if saved is None:
            return await self.get_by_id(notification_id)
        logger.debug("Notification %s delivered to %s", saved.id, user_id)
        await self._notify_observers("on_delivered", saved)
        await self._publish(NOTIFICATION_DELIVERED, self._lifecycle_payload(saved))
        return saved

    async def delete(self, notification_id: str, user_id: str) -> bool:
        notification = await self.get_by_id(notification_id)
        ensure_owner(notification, user_id)
        if not await self._notifications.delete(notification_id):
            raise NotFoundError(f"Notification {notification_id} not found")
        logger.info("Notification %s deleted by %s", notification_id, user_id)
        return True

    async def get_stats(self, user_id: str) -> NotificationStats:
        """Return counters where every category and priority key is present."""

        stats = await self._notifications.get_stats(user_id)
        return NotificationStats(
            total=stats.total,
            unread=stats.unread,
            by_category={
                category: stats.by_category.get(category, 0) for category in CATEGORIES
            },
            by_priority={
                priority: stats.by_priority.get(priority, 0) for priority in PRIORITIES
            },
        )

    # Preferences -------------------------------------------------------------

    async def get_preferences(self, user_id: str) -> NotificationPreferences:
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached
        preferences = await self._load_preferences(user_id)
        self._cache.put(preferences)
        return preferences

    async def update_preferences(
        self, user_id: str, partial: Mapping[str, Any]
    ) -> NotificationPreferences:
        """Merge ``partial`` into the stored preferences of ``user_id``.

        ``channels`` and ``types`` are merged key by key; ``quiet_hours``
        replaces the stored window entirely.
        """

        if not user_id:
            raise ValidationError("user_id is required")
        changes = ensure_valid_preferences_update(partial)
        current = await self._load_preferences(user_id)
        merged = NotificationPreferences(
            user_id=user_id,
            channels={**current.channels, **changes.get("channels", {})},
            types={**current.types, **changes.get("types", {})},
            quiet_hours=changes.get("quiet_hours", current.quiet_hours),
            updated_at=self._clock(),
        )
        saved = await self._preferences.update(merged)
        self._cache.put(saved)
        logger.info("Updated notification preferences for user %s", user_id)
        return saved

    async def _load_preferences(self, user_id: str) -> NotificationPreferences:
        preferences = await self._preferences.find_by_user(user_id)
        if preferences is None:
            preferences = await self._preferences.create(default_preferences(user_id))
        return preferences

    # Delivery ----------------------------------------------------------------

    async def send(self, notification: Notification) -> list[DeliveryResult]:
        """Attempt every eligible channel and return one result per attempt.

        Channels disabled by preference or suppressed by quiet hours produce
        no result. Adapter failures are returned as failed results and never
        prevent the remaining channels from being attempted.
        """

        preferences = await self.get_preferences(notification.user_id)
        channels = eligible_channels(notification, preferences, self._clock())
        results: list[DeliveryResult] = []
        for channel in channels:
            results.append(await self._deliver(channel, notification))
        return results

    async def _deliver(self, channel: str, notification: Notification) -> DeliveryResult:
        adapter = self._adapters.get(channel)
        if adapter is None:
            logger.warning("No delivery adapter registered for channel %s", channel)
            return DeliveryResult.failed(channel, "No delivery adapter configured")
        try:
            result = await adapter.deliver(notification)
        except Exception as exc:
            logger.exception(
                "Delivery through %s failed for notification %s", channel, notification.id
            )
            return DeliveryResult.failed(channel, str(exc) or exc.__class__.__name__)
        if not result.success:
            logger.warning(
                "Delivery through %s failed for notification %s: %s",
                channel,
                notification.id,
                result.error,
            )
        return result

    async def record_delivery(
        self, notification: Notification, results: list[DeliveryResult]
    ) -> Notification:
        """Apply ``results`` to the stored status of ``notification``.

        Any success moves a pending notification to ``sent``; a non-empty list
        of failures marks a never-sent notification as ``failed``. Notifications
        that moved on in the meantime are left untouched.
        """

        if not results:
            return notification
        current = await self._notifications.find_by_id(notification.id)
        if current is None:
            return notification
        if current.status != STATUS_PENDING:
            return current

        if any(result.success for result in results):
            saved = await self._notifications.transition(
                current.id,
                STATUS_SENT,
                from_statuses={STATUS_PENDING},
                sent_at=self._clock(),
            )
        else:
            saved = await self._notifications.transition(
                current.id, STATUS_FAILED, from_statuses={STATUS_PENDING}
            )
            if saved is not None:
                logger.warning(
                    "All channels failed for notification %s: %s",
                    current.id,
                    "; ".join(f"{r.channel}: {r.error}" for r in results),
                )
        if saved is None:
            return await self.get_by_id(current.id)
        return saved

    async def dispatch(
        self, request: NotificationRequest
    ) -> tuple[Notification, list[DeliveryResult]]:
        """Create, deliver and record the outcome of a notification."""

        notification = await self.create(request)
        results = await self.send(notification)
        notification = await self.record_delivery(notification, results)
        return notification, results

    async def send_direct(self, request: NotificationRequest) -> list[DeliveryResult]:
        """Deliver ``request`` by email/SMS without storing or announcing it.

        Used for messages carrying credentials such as reset tokens: nothing
        reaches the notifications table, the bus or the websockets. In-app is
        dropped from the channels since there is no record to list.
        """

        request = ensure_valid_request(request)
        channels = [
            channel
            for channel in normalize_channels(request.channels)
            if channel != CHANNEL_IN_APP
        ]
        if not channels:
            raise ValidationError("Direct notifications need an email or sms channel")
        notification = Notification(
            id=uuid4().hex,
            user_id=request.user_id,
            type=request.type,
            category=request.category or category_for_type(request.type),
            priority=request.priority or default_priority_for_type(request.type),
            title=request.title,
            message=request.message,
            data=request.data,
            channels=channels,
            status=STATUS_PENDING,
            created_at=self._clock(),
        )
        results = await self.send(notification)
        logger.info(
            "Sent direct %s notification to user %s through %s",
            notification.type,
            notification.user_id,
            ", ".join(result.channel for result in results) or "no channel",
        )
        return results

    # Lifecycle ---------------------------------------------------------------

    def _lifecycle_payload(self, notification: Notification) -> dict[str, Any]:
        return {
            "eventId": uuid4().hex,
            "origin": self._instance_id,
            "notificationId": notification.id,
            "userId": notification.user_id,
            "notification": notification.to_payload(),
        }

    async def _notify_observers(self, hook: str, *args: Any) -> None:
        for observer in self._observers:
            try:
                await getattr(observer, hook)(*args)
            except Exception:
                logger.exception("Notification observer %r failed in %s", observer, hook)

    async def _publish(self, topic: str, payload: dict[str, Any]) -> None:
        if self._bus is None:
            return
        try:
            await self._bus.publish(topic, payload)
        except TransientBusError as exc:
            logger.warning("Could not publish %s: %s", topic, exc)


__all__ = ["NotificationEngine", "ensure_owner"]
