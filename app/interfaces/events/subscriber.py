"""Bus subscriber that decodes, dedupes and dispatches domain events."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass
from functools import partial
from typing import Callable, Mapping

from pydantic import BaseModel, ValidationError

from app.application.use_cases.events import ALL_HANDLERS, EventHandlerContext, TopicHandler
from app.application.use_cases.notifications.ports import EventBus

logger = logging.getLogger(__name__)

DEFAULT_DEDUPE_TTL_SECONDS = 600
DEFAULT_DEDUPE_MAX_ENTRIES = 10_000


class MalformedEventError(ValueError):
    """Raised when a bus message cannot be turned into its topic model."""


@dataclass
class SubscriberStats:
    received: int = 0
    processed: int = 0
    rejected: int = 0
    duplicates: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class SeenEvents:
    """Remember event keys for ``ttl_seconds`` to drop redeliveries."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_DEDUPE_TTL_SECONDS,
        *,
        max_entries: int = DEFAULT_DEDUPE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, float] = OrderedDict()

    def __contains__(self, key: str) -> bool:
        self._evict()
        return key in self._entries

    def add(self, key: str) -> None:
        if self._ttl <= 0:
            return
        self._entries[key] = self._clock() + self._ttl
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        self._evict()
        return len(self._entries)

    def _evict(self) -> None:
        now = self._clock()
        while self._entries:
            key, expires_at = next(iter(self._entries.items()))
            if expires_at > now:
                break
            self._entries.pop(key)


def decode_event(model: type[BaseModel], message: str | bytes) -> BaseModel:
    """Parse ``message`` and validate it against ``model``.

    Messages wrapped in a ``{"type": ..., "payload": {...}}`` envelope are
    unwrapped first.
    """

    try:
        data = json.loads(message)
    except (TypeError, ValueError) as exc:
        raise MalformedEventError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedEventError("Event payload must be a JSON object")

    payload = data.get("payload")
    if "type" in data and isinstance(payload, dict):
        envelope_id = data.get("eventId") or data.get("id")
        data = dict(payload)
        if envelope_id and "eventId" not in data:
            data["eventId"] = envelope_id

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedEventError(str(exc)) from exc


def dedupe_key(topic: str, event: BaseModel, message: str | bytes) -> str:
    event_id = getattr(event, "event_id", None)
    if event_id:
        return f"{topic}:{event_id}"
    raw = message.encode("utf-8") if isinstance(message, str) else message
    digest = hashlib.sha256(topic.encode("utf-8") + b"\0" + raw).hexdigest()
    return f"{topic}:{digest}"


class DomainEventSubscriber:
    """Route bus messages to their topic handler.

    Handlers never see malformed or duplicate events, and no error escapes
    :meth:`handle`: every outcome is logged and counted per topic.
    """

    def __init__(
        self,
        context: EventHandlerContext,
        *,
        handlers: Mapping[str, TopicHandler] | None = None,
        dedupe_ttl_seconds: float = DEFAULT_DEDUPE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._context = context
        self._handlers = dict(ALL_HANDLERS if handlers is None else handlers)
        self._seen = SeenEvents(dedupe_ttl_seconds, clock=clock)
        self._stats: dict[str, SubscriberStats] = {}

    @property
    def topics(self) -> list[str]:
        return list(self._handlers)

    def stats_for(self, topic: str) -> SubscriberStats:
        return self._stats.setdefault(topic, SubscriberStats())

    def totals(self) -> SubscriberStats:
        total = SubscriberStats()
        for stats in self._stats.values():
            for name, value in stats.as_dict().items():
                setattr(total, name, getattr(total, name) + value)
        return total

    async def register(self, bus: EventBus) -> None:
        for topic in self._handlers:
            await bus.subscribe(topic, partial(self.handle, topic))
        logger.info("Subscribed to %s topics", len(self._handlers))

    async def handle(self, topic: str, message: str | bytes) -> None:
        stats = self.stats_for(topic)
        stats.received += 1

        handler = self._handlers.get(topic)
        if handler is None:
            stats.rejected += 1
            logger.warning("No handler registered for topic %s", topic)
            return

        try:
            event = decode_event(handler.model, message)
        except MalformedEventError as exc:
            stats.rejected += 1
            logger.warning("Rejected malformed %s event: %s", topic, exc)
            return

        key = dedupe_key(topic, event, message)
        if key in self._seen:
            stats.duplicates += 1
            logger.info("Ignoring duplicate %s event %s", topic, key)
            return

        try:
            await handler.handle(self._context, event)
        except Exception:
            stats.failed += 1
            logger.exception("Handler for %s failed", topic)
            return

        self._seen.add(key)
        stats.processed += 1


async def register_subscribers(
    bus: EventBus,
    context: EventHandlerContext,
    *,
    dedupe_ttl_seconds: float = DEFAULT_DEDUPE_TTL_SECONDS,
    handlers: Mapping[str, TopicHandler] | None = None,
) -> DomainEventSubscriber:
    """Build a :class:`DomainEventSubscriber` and subscribe it to ``bus``."""

    subscriber = DomainEventSubscriber(
        context, handlers=handlers, dedupe_ttl_seconds=dedupe_ttl_seconds
    )
    await subscriber.register(bus)
    return subscriber


__all__ = [
    "DomainEventSubscriber",
    "MalformedEventError",
    "SeenEvents",
    "SubscriberStats",
    "decode_event",
    "dedupe_key",
    "register_subscribers",
]