"""Pub/sub transports carrying domain and notification lifecycle events."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import defaultdict
from typing import Any, DefaultDict

from redis.exceptions import RedisError

from app.application.use_cases.notifications.ports import EventHandler
from app.config import Settings
from app.domain.exceptions import TransientBusError

from .redis_client import get_async_redis_client

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000
READ_TIMEOUT_SECONDS = 1.0
READ_ERROR_BACKOFF_SECONDS = 1.0


def encode_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, default=str)


async def _invoke(topic: str, handler: EventHandler, message: str) -> None:
    try:
        await handler(message)
    except Exception:
        logger.exception("Handler %r failed for topic %s", handler, topic)


class InMemoryEventBus:
    """Single-process bus that hands messages straight to subscribers."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[EventHandler]] = defaultdict(list)

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        await self.publish_raw(topic, encode_payload(payload))

    async def publish_raw(self, topic: str, message: str) -> None:
        """Deliver an already encoded ``message`` to the subscribers of ``topic``."""

        for handler in list(self._handlers.get(topic, ())):
            await _invoke(topic, handler, message)

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        self._handlers[topic].append(handler)

    def topics(self) -> list[str]:
        return sorted(self._handlers)

    async def close(self) -> None:
        self._handlers.clear()


class RedisEventBus:
    """Redis pub/sub bus with one queue and one worker task per topic.

    A single reader task drains the pubsub connection and hands each message
    to the queue of its topic, so a slow handler only delays its own topic.
    """

    def __init__(self, client: Any, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._client = client
        self._queue_size = queue_size
        self._pubsub: Any = None
        self._handlers: DefaultDict[str, list[EventHandler]] = defaultdict(list)
        self._queues: dict[str, asyncio.Queue[str]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}
        self._reader: asyncio.Task[None] | None = None

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        try:
            await self._client.publish(topic, encode_payload(payload))
        except RedisError as exc:
            raise TransientBusError(f"Publishing to {topic} failed: {exc}") from exc

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        self._handlers[topic].append(handler)
        if topic in self._queues:
            return

        self._queues[topic] = asyncio.Queue(maxsize=self._queue_size)
        self._workers[topic] = asyncio.create_task(
            self._work(topic), name=f"event-bus-worker:{topic}"
        )
        try:
            if self._pubsub is None:
                self._pubsub = self._client.pubsub(ignore_subscribe_messages=True)
            await self._pubsub.subscribe(topic)
        except RedisError as exc:
            raise TransientBusError(f"Subscribing to {topic} failed: {exc}") from exc

        if self._reader is None:
            self._reader = asyncio.create_task(self._read(), name="event-bus-reader")
        logger.info("Subscribed to %s", topic)

    async def _read(self) -> None:
        while True:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=READ_TIMEOUT_SECONDS
                )
            except RedisError as exc:
                logger.warning("Reading from Redis pub/sub failed: %s", exc)
                await asyncio.sleep(READ_ERROR_BACKOFF_SECONDS)
                continue
            if not message:
                continue

            channel = message.get("channel")
            data = message.get("data")
            if isinstance(channel, bytes):
                channel = channel.decode("utf-8")
            if isinstance(data, bytes):
                data = data.decode("utf-8", errors="replace")
            queue = self._queues.get(channel)
            if queue is None or not isinstance(data, str):
                continue
            await queue.put(data)

    async def _work(self, topic: str) -> None:
        queue = self._queues[topic]
        while True:
            message = await queue.get()
            try:
                for handler in list(self._handlers[topic]):
                    await _invoke(topic, handler, message)
            finally:
                queue.task_done()

    async def close(self) -> None:
        tasks = [*self._workers.values()]
        if self._reader is not None:
            tasks.append(self._reader)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._workers.clear()
        self._queues.clear()
        self._reader = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None


def build_event_bus(settings: Settings) -> InMemoryEventBus | RedisEventBus:
    """Return a Redis bus when Redis is configured, otherwise an in-memory one."""

    client = get_async_redis_client(settings)
    if client is None:
        logger.info("Redis not configured; using the in-memory event bus")
        return InMemoryEventBus()
    return RedisEventBus(client)


__all__ = [
    "InMemoryEventBus",
    "RedisEventBus",
    "build_event_bus",
    "encode_payload",
]
