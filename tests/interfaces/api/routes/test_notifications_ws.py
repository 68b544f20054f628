"""Websocket endpoint tests running the app against an in-memory database."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.config import Settings
from app.container import build_container
from app.domain.entities import NotificationRequest
from app.infrastructure.event_bus import InMemoryEventBus
from app.infrastructure.notifications import NotificationConnectionManager
from app.infrastructure.security import create_access_token
from main import create_app


@pytest.fixture()
def container(session_factory):
    return build_container(
        Settings(),
        session_factory=session_factory,
        bus=InMemoryEventBus(),
        manager=NotificationConnectionManager(),
    )


@pytest.fixture()
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


def _request(user_id: str = "user-1", title: str = "Care Plan Approved") -> NotificationRequest:
    return NotificationRequest(
        user_id=user_id,
        type="care_plan_approved",
        title=title,
        message="Your care plan has been approved.",
        channels=["in_app"],
    )


def test_health_reports_instance(client, container) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["instance_id"] == container.engine.instance_id
    assert body["events"]["received"] == 0


def test_missing_or_invalid_token_is_rejected(client) -> None:
    for url in ("/notifications/ws", "/notifications/ws?token=garbage"):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(url):
                pass
        assert exc_info.value.code == 1008


def test_init_frame_lists_unread_notifications(client, container) -> None:
    created = client.portal.call(container.engine.create, _request())
    client.portal.call(container.engine.create, _request(user_id="user-2"))
    token = create_access_token("user-1")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        init = websocket.receive_json()
        websocket.send_json({"type": "ping"})
        pong = websocket.receive_json()

    assert init["type"] == "init"
    assert [item["id"] for item in init["data"]] == [created.id]
    assert pong == {"type": "pong"}


def test_ack_marks_notification_read_and_syncs_clients(client, container) -> None:
    created = client.portal.call(container.engine.create, _request())
    token = create_access_token("user-1")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "unknown"})
        websocket.send_json({"type": "ack", "ids": ["missing", created.id]})
        frame = websocket.receive_json()

    assert frame["type"] == "notification.read"
    assert frame["data"]["id"] == created.id
    assert frame["data"]["read_at"] is not None
    stored = client.portal.call(container.engine.get_by_id, created.id)
    assert stored.status == "read"


def test_dispatched_notification_is_pushed_to_open_socket(client, container) -> None:
    token = create_access_token("user-1")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "init", "data": []}
        assert container.manager.connection_count("user-1") == 1
        dispatched, _ = client.portal.call(container.engine.dispatch, _request(title="Hello"))
        frame = websocket.receive_json()

    assert frame["type"] == "notification"
    assert frame["data"]["id"] == dispatched.id
    assert frame["data"]["title"] == "Hello"
