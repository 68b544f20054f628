"""Shared fixtures: in-memory database, fixed clock and recording fakes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from app.application.use_cases.events import EventHandlerContext
from app.application.use_cases.notifications import NotificationEngine
from app.domain.entities import CHANNELS, DeliveryResult, Notification, ServicesPlan
from app.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from app.infrastructure.event_bus import InMemoryEventBus
from app.infrastructure.repositories import (
    ServicesPlanRepository,
    SqlNotificationStore,
    SqlPreferencesStore,
    SqlServicesPlanStore,
)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class RecordingAdapter:
    """Delivery adapter that records every attempt."""

    def __init__(
        self,
        channel: str,
        *,
        error: str | None = None,
        raises: Exception | None = None,
    ) -> None:
        self.channel = channel
        self.error = error
        self.raises = raises
        self.delivered: list[Notification] = []

    async def deliver(self, notification: Notification) -> DeliveryResult:
        self.delivered.append(notification)
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            return DeliveryResult.failed(self.channel, self.error)
        return DeliveryResult.ok(self.channel)


class RecordingBus(InMemoryEventBus):
    """In-memory bus that also keeps every published payload."""

    def __init__(self) -> None:
        super().__init__()
        self.published: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        self.published.append((topic, payload))
        await super().publish(topic, payload)

    def payloads(self, topic: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.published if name == topic]


class RecordingProviderCache:
    def __init__(self) -> None:
        self.invalidated: list[str] = []

    async def invalidate_provider(self, provider_id: str) -> None:
        self.invalidated.append(provider_id)


@pytest.fixture()
def db_engine():
    engine = build_engine("sqlite:///:memory:")
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture()
def adapters() -> dict[str, RecordingAdapter]:
    return {channel: RecordingAdapter(channel) for channel in CHANNELS}


@pytest.fixture()
def notification_store(session_factory) -> SqlNotificationStore:
    return SqlNotificationStore(session_factory)


@pytest.fixture()
def preferences_store(session_factory) -> SqlPreferencesStore:
    return SqlPreferencesStore(session_factory)


@pytest.fixture()
def notification_engine(
    notification_store, preferences_store, bus, adapters, clock
) -> NotificationEngine:
    return NotificationEngine(
        notifications=notification_store,
        preferences=preferences_store,
        bus=bus,
        adapters=adapters.values(),
        clock=clock,
        instance_id="instance-a",
    )


@pytest.fixture()
def services_plan_store(session_factory) -> SqlServicesPlanStore:
    return SqlServicesPlanStore(session_factory)


@pytest.fixture()
def provider_cache() -> RecordingProviderCache:
    return RecordingProviderCache()


@pytest.fixture()
def handler_context(
    notification_engine, bus, services_plan_store, provider_cache
) -> EventHandlerContext:
    return EventHandlerContext(
        engine=notification_engine,
        bus=bus,
        services_plans=services_plan_store,
        provider_cache=provider_cache,
    )


@pytest.fixture()
def seed_services_plan(session_factory):
    """Return a helper storing a services plan directly through the repository."""

    def _seed(plan_id: str, care_plan_id: str, status: str, *, client_id: str = "client-1"):
        with session_factory() as session:
            return ServicesPlanRepository(session).create(
                ServicesPlan(
                    id=plan_id,
                    care_plan_id=care_plan_id,
                    client_id=client_id,
                    title=f"Plan {plan_id}",
                    status=status,
                )
            )

    return _seed
