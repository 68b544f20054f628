"""Tests for decoding, deduplication and accounting of bus messages."""

from __future__ import annotations

import json

import pytest

from app.application.use_cases.events import TopicHandler
from app.application.use_cases.events.schemas import UserEvent
from app.interfaces.events import DomainEventSubscriber, MalformedEventError
from app.interfaces.events.subscriber import SeenEvents, decode_event, register_subscribers

TOPIC = "user.registered"


class _Recorder:
    def __init__(self, *, fail: bool = False) -> None:
        self.events: list[UserEvent] = []
        self.fail = fail

    async def __call__(self, context, event: UserEvent) -> None:
        if self.fail:
            raise RuntimeError("handler exploded")
        self.events.append(event)


def _subscriber(recorder: _Recorder, **kwargs) -> DomainEventSubscriber:
    return DomainEventSubscriber(
        context=None, handlers={TOPIC: TopicHandler(UserEvent, recorder)}, **kwargs
    )


def test_decode_unwraps_type_payload_envelope() -> None:
    message = json.dumps(
        {"type": TOPIC, "id": "evt-9", "payload": {"user": {"id": "u-1", "firstName": "Ana"}}}
    )

    event = decode_event(UserEvent, message)

    assert event.user.id == "u-1"
    assert event.user.first_name == "Ana"
    assert event.event_id == "evt-9"


@pytest.mark.parametrize(
    "message",
    ["not json", "[1, 2]", json.dumps({"user": {}}), json.dumps({"user": {"id": ""}}), b"\xff"],
)
def test_decode_fails_closed(message) -> None:
    with pytest.raises(MalformedEventError):
        decode_event(UserEvent, message)


@pytest.mark.asyncio
async def test_malformed_message_does_not_stop_later_events() -> None:
    recorder = _Recorder()
    subscriber = _subscriber(recorder)

    await subscriber.handle(TOPIC, "{broken")
    await subscriber.handle(TOPIC, json.dumps({"user": {"id": "u-1"}}))

    stats = subscriber.stats_for(TOPIC)
    assert stats.received == 2
    assert stats.rejected == 1
    assert stats.processed == 1
    assert [event.user.id for event in recorder.events] == ["u-1"]


@pytest.mark.asyncio
async def test_redelivered_event_is_handled_once() -> None:
    recorder = _Recorder()
    subscriber = _subscriber(recorder)
    message = json.dumps({"eventId": "evt-1", "user": {"id": "u-1"}})
    same_id_new_body = json.dumps({"eventId": "evt-1", "user": {"id": "u-2"}})

    await subscriber.handle(TOPIC, message)
    await subscriber.handle(TOPIC, message)
    await subscriber.handle(TOPIC, same_id_new_body)

    assert len(recorder.events) == 1
    assert subscriber.stats_for(TOPIC).duplicates == 2


@pytest.mark.asyncio
async def test_events_without_id_are_deduplicated_by_content() -> None:
    recorder = _Recorder()
    subscriber = _subscriber(recorder)

    await subscriber.handle(TOPIC, json.dumps({"user": {"id": "u-1"}}))
    await subscriber.handle(TOPIC, json.dumps({"user": {"id": "u-1"}}))
    await subscriber.handle(TOPIC, json.dumps({"user": {"id": "u-2"}}))

    assert [event.user.id for event in recorder.events] == ["u-1", "u-2"]


@pytest.mark.asyncio
async def test_dedupe_window_expires() -> None:
    now = [0.0]
    recorder = _Recorder()
    subscriber = _subscriber(recorder, dedupe_ttl_seconds=60, clock=lambda: now[0])
    message = json.dumps({"eventId": "evt-1", "user": {"id": "u-1"}})

    await subscriber.handle(TOPIC, message)
    now[0] = 61.0
    await subscriber.handle(TOPIC, message)

    assert len(recorder.events) == 2


@pytest.mark.asyncio
async def test_failed_handler_is_counted_and_can_be_retried(caplog) -> None:
    recorder = _Recorder(fail=True)
    subscriber = _subscriber(recorder)
    message = json.dumps({"eventId": "evt-1", "user": {"id": "u-1"}})

    with caplog.at_level("ERROR"):
        await subscriber.handle(TOPIC, message)
    recorder.fail = False
    await subscriber.handle(TOPIC, message)

    stats = subscriber.stats_for(TOPIC)
    assert stats.failed == 1
    assert stats.processed == 1
    assert "handler exploded" in caplog.text
    assert subscriber.totals().received == 2


@pytest.mark.asyncio
async def test_unknown_topic_is_rejected() -> None:
    subscriber = _subscriber(_Recorder())

    await subscriber.handle("nobody.listens", "{}")

    assert subscriber.stats_for("nobody.listens").rejected == 1


@pytest.mark.asyncio
async def test_register_subscribes_every_topic(bus) -> None:
    recorder = _Recorder()

    subscriber = await register_subscribers(
        bus, context=None, handlers={TOPIC: TopicHandler(UserEvent, recorder)}
    )
    await bus.publish(TOPIC, {"user": {"id": "u-1"}})

    assert bus.topics() == [TOPIC]
    assert subscriber.topics == [TOPIC]
    assert [event.user.id for event in recorder.events] == ["u-1"]


def test_seen_events_disabled_with_zero_ttl() -> None:
    seen = SeenEvents(0)
    seen.add("key")

    assert "key" not in seen
    assert len(seen) == 0
