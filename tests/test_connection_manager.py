"""Tests for the per-process websocket registry."""

from __future__ import annotations

import pytest

from app.infrastructure.notifications import NotificationConnectionManager


class FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.broken = broken
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.mark.asyncio
async def test_send_reaches_every_socket_of_the_user() -> None:
    manager = NotificationConnectionManager()
    first, second, other = FakeSocket(), FakeSocket(), FakeSocket()
    await manager.connect("user-1", first)
    await manager.connect("user-1", second)
    await manager.connect("user-2", other)

    delivered = await manager.send_to_user("user-1", {"type": "notification"})

    assert delivered == 2
    assert first.accepted and second.accepted
    assert first.sent == second.sent == [{"type": "notification"}]
    assert other.sent == []


@pytest.mark.asyncio
async def test_failed_socket_is_dropped_and_not_counted() -> None:
    manager = NotificationConnectionManager()
    healthy, broken = FakeSocket(), FakeSocket(broken=True)
    await manager.connect("user-1", healthy)
    await manager.connect("user-1", broken)

    assert await manager.send_to_user("user-1", {"type": "ping"}) == 1
    assert manager.connection_count("user-1") == 1
    assert healthy.sent == [{"type": "ping"}]


@pytest.mark.asyncio
async def test_disconnect_forgets_user_and_unknown_user_gets_nothing() -> None:
    manager = NotificationConnectionManager()
    socket = FakeSocket()
    await manager.connect("user-1", socket)
    await manager.connect("user-1", socket)
    assert manager.connection_count("user-1") == 1

    manager.disconnect("user-1", socket)
    manager.disconnect("user-1", socket)

    assert manager.connection_count("user-1") == 0
    assert await manager.send_to_user("user-1", {"type": "ping"}) == 0
