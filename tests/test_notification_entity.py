"""Tests for the notification entity: type mapping and status transitions."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.entities import (
    CATEGORIES,
    NOTIFICATION_TYPE_MAPPING,
    PRIORITIES,
    STATUS_DELIVERED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_READ,
    STATUS_SENT,
    Notification,
    category_for_type,
    default_priority_for_type,
    normalize_channels,
)
from app.domain.exceptions import InvalidTransitionError

NOW = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)


def _notification(status: str = STATUS_PENDING) -> Notification:
    return Notification(
        id="n-1",
        user_id="user-1",
        type="care_plan_approved",
        category="care_plan",
        priority="high",
        title="Care Plan Approved",
        message="Your care plan was approved.",
        status=status,
    )


def test_every_type_maps_to_a_known_category_and_priority() -> None:
    for notification_type, (category, priority) in NOTIFICATION_TYPE_MAPPING.items():
        assert category in CATEGORIES, notification_type
        assert priority in PRIORITIES, notification_type


@pytest.mark.parametrize(
    ("notification_type", "category", "priority"),
    [
        ("appointment_reminder", "appointment", "high"),
        ("care_plan_approved", "care_plan", "high"),
        ("service_plan_created", "service_plan", "normal"),
        ("payment_failed", "payment", "urgent"),
        ("password_reset", "account", "high"),
        ("system_update", "system", "normal"),
    ],
)
def test_type_mapping(notification_type: str, category: str, priority: str) -> None:
    assert category_for_type(notification_type) == category
    assert default_priority_for_type(notification_type) == priority


def test_normalize_channels_defaults_to_in_app_and_drops_duplicates() -> None:
    assert normalize_channels(None) == ["in_app"]
    assert normalize_channels([]) == ["in_app"]
    assert normalize_channels(["email", "in_app", "email"]) == ["email", "in_app"]


def test_pending_notification_can_be_sent_delivered_and_read() -> None:
    notification = _notification()

    notification.mark_sent(NOW)
    assert notification.status == STATUS_SENT
    assert notification.sent_at == NOW

    notification.mark_delivered()
    assert notification.status == STATUS_DELIVERED

    notification.mark_read(NOW)
    assert notification.status == STATUS_READ
    assert notification.read_at == NOW
    assert notification.is_read and notification.is_terminal


def test_read_notification_cannot_move_back() -> None:
    notification = _notification(STATUS_READ)

    with pytest.raises(InvalidTransitionError):
        notification.mark_sent(NOW)
    with pytest.raises(InvalidTransitionError):
        notification.mark_delivered()


def test_sent_notification_cannot_fail() -> None:
    notification = _notification()
    notification.mark_sent(NOW)

    with pytest.raises(InvalidTransitionError):
        notification.mark_failed()


def test_pending_notification_can_fail_and_then_stays_failed() -> None:
    notification = _notification()
    notification.mark_failed()

    assert notification.status == STATUS_FAILED
    assert notification.is_terminal
    with pytest.raises(InvalidTransitionError):
        notification.mark_read(NOW)


def test_payload_uses_iso_dates() -> None:
    notification = _notification()
    notification.created_at = NOW

    payload = notification.to_payload()

    assert payload["created_at"] == NOW.isoformat()
    assert payload["read_at"] is None
    assert payload["channels"] == ["in_app"]
