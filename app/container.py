"""Wiring of the notification engine, its adapters and the event bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import httpx
from sqlalchemy.orm import Session, sessionmaker

from app.application.use_cases.events import EventHandlerContext
from app.application.use_cases.notifications import NotificationEngine, PreferencesCache
from app.application.use_cases.notifications.ports import EventBus
from app.config import Settings, get_settings
from app.infrastructure.cache import RedisProviderCache
from app.infrastructure.database import SessionLocal
from app.infrastructure.email import SendGridEmailAdapter
from app.infrastructure.event_bus import build_event_bus
from app.infrastructure.notifications import (
    InAppDeliveryAdapter,
    NotificationConnectionManager,
    NotificationPublisher,
    RealtimeEventPublisher,
    RealtimeSyncObserver,
    notification_manager,
)
from app.infrastructure.redis_client import get_async_redis_client
from app.infrastructure.repositories import (
    SqlContactDirectory,
    SqlNotificationStore,
    SqlPreferencesStore,
    SqlServicesPlanStore,
)
from app.infrastructure.retry import RetryPolicy
from app.infrastructure.sms import DEFAULT_TIMEOUT_SECONDS, TwilioSmsAdapter
from app.interfaces.events import DomainEventSubscriber

logger = logging.getLogger(__name__)


@dataclass
class NotificationContainer:
    """Everything a running process needs, created once per application."""

    settings: Settings
    engine: NotificationEngine
    bus: EventBus
    notifications: SqlNotificationStore
    subscriber: DomainEventSubscriber
    manager: NotificationConnectionManager
    http_client: httpx.AsyncClient | None = None
    started: bool = field(default=False, init=False)

    async def start(self) -> None:
        if self.started:
            return
        await self.subscriber.register(self.bus)
        self.started = True
        logger.info("Notification engine %s started", self.engine.instance_id)

    async def close(self) -> None:
        close_bus = getattr(self.bus, "close", None)
        if close_bus is not None:
            await close_bus()
        if self.http_client is not None:
            await self.http_client.aclose()
        self.started = False


def build_container(
    settings: Settings | None = None,
    *,
    session_factory: sessionmaker[Session] | None = None,
    bus: EventBus | None = None,
    manager: NotificationConnectionManager | None = None,
    redis_client: Any | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> NotificationContainer:
    """Assemble the engine with SQL stores, channel adapters and the bus."""

    settings = settings or get_settings()
    session_factory = session_factory or SessionLocal
    manager = manager or notification_manager
    if redis_client is None:
        redis_client = get_async_redis_client(settings)
    if bus is None:
        bus = build_event_bus(settings)
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS)

    instance_id = uuid4().hex
    notifications = SqlNotificationStore(session_factory)
    contacts = SqlContactDirectory(session_factory)
    policy = RetryPolicy.from_settings(settings)
    realtime = RealtimeEventPublisher(manager)

    adapters = [
        InAppDeliveryAdapter(NotificationPublisher(manager), bus=bus, origin=instance_id),
        SendGridEmailAdapter(
            contacts,
            api_key=settings.sendgrid_api_key,
            sender=settings.sendgrid_sender,
            policy=policy,
        ),
        TwilioSmsAdapter(
            contacts,
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_from_number,
            policy=policy,
            client=http_client,
        ),
    ]
    engine = NotificationEngine(
        notifications=notifications,
        preferences=SqlPreferencesStore(session_factory),
        bus=bus,
        adapters=adapters,
        preferences_cache=PreferencesCache(
            ttl_seconds=settings.preferences_cache_ttl_seconds,
            max_entries=settings.preferences_cache_max_entries,
        ),
        observers=[RealtimeSyncObserver(realtime)],
        instance_id=instance_id,
    )
    context = EventHandlerContext(
        engine=engine,
        bus=bus,
        services_plans=SqlServicesPlanStore(session_factory),
        provider_cache=RedisProviderCache(redis_client),
        realtime=realtime,
    )
    subscriber = DomainEventSubscriber(
        context, dedupe_ttl_seconds=settings.event_dedupe_ttl_seconds
    )
    return NotificationContainer(
        settings=settings,
        engine=engine,
        bus=bus,
        notifications=notifications,
        subscriber=subscriber,
        manager=manager,
        http_client=http_client,
    )


__all__ = ["NotificationContainer", "build_container"]
