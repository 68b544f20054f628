"""Tests for quiet hours and channel eligibility rules."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.application.use_cases.notifications import (
    channel_skip_reason,
    eligible_channels,
    is_within_quiet_hours,
)
from app.domain.entities import (
    Notification,
    NotificationPreferences,
    QuietHours,
    TypePreference,
)


def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2024, 5, 6, hour, minute, second, tzinfo=timezone.utc)


def _notification(channels: list[str]) -> Notification:
    return Notification(
        id="n-1",
        user_id="user-1",
        type="care_plan_updated",
        category="care_plan",
        priority="normal",
        title="Care Plan Update",
        message="Updated",
        channels=channels,
    )


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (_at(21, 59), False),
        (_at(22, 0), True),
        (_at(23, 30), True),
        (_at(0, 0), True),
        (_at(7, 0), True),
        (_at(7, 0, 59), False),
        (_at(7, 1), False),
        (_at(12, 0), False),
    ],
)
def test_window_spanning_midnight(now: datetime, expected: bool) -> None:
    quiet_hours = QuietHours(enabled=True, start="22:00", end="07:00")

    assert is_within_quiet_hours(quiet_hours, now) is expected


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (_at(8, 59), False),
        (_at(9, 0), True),
        (_at(13, 0), True),
        (_at(17, 0), True),
        (_at(17, 0, 1), False),
        (_at(17, 1), False),
    ],
)
def test_window_within_one_day(now: datetime, expected: bool) -> None:
    quiet_hours = QuietHours(enabled=True, start="09:00", end="17:00")

    assert is_within_quiet_hours(quiet_hours, now) is expected


def test_window_uses_its_own_timezone() -> None:
    quiet_hours = QuietHours(
        enabled=True, start="22:00", end="07:00", timezone="America/New_York"
    )

    # 03:00 UTC is 23:00 in New York during daylight saving time.
    assert is_within_quiet_hours(quiet_hours, _at(3, 0)) is True
    assert is_within_quiet_hours(quiet_hours, _at(15, 0)) is False


def test_disabled_or_invalid_window_never_blocks() -> None:
    assert is_within_quiet_hours(QuietHours(enabled=False), _at(23)) is False
    invalid = QuietHours(enabled=True, start="25:00", end="07:00")
    assert is_within_quiet_hours(invalid, _at(23)) is False
    unknown_zone = QuietHours(enabled=True, timezone="Mars/Olympus")
    assert is_within_quiet_hours(unknown_zone, _at(23)) is False


def test_quiet_hours_suppress_email_and_sms_but_not_in_app() -> None:
    preferences = NotificationPreferences(
        user_id="user-1",
        quiet_hours=QuietHours(enabled=True, start="22:00", end="07:00"),
    )
    notification = _notification(["email", "sms", "in_app"])

    assert eligible_channels(notification, preferences, _at(23)) == ["in_app"]
    assert eligible_channels(notification, preferences, _at(12)) == [
        "in_app",
        "email",
        "sms",
    ]


def test_skip_reasons() -> None:
    preferences = NotificationPreferences(
        user_id="user-1",
        channels={"in_app": True, "email": False, "sms": True},
        types={"care_plan_updated": TypePreference(enabled=True, channels=["in_app"])},
    )
    notification = _notification(["in_app", "email", "sms"])

    assert channel_skip_reason("email", notification, preferences, _at(12)) == (
        "channel_disabled"
    )
    assert channel_skip_reason("sms", notification, preferences, _at(12)) == "type_disabled"
    assert channel_skip_reason("in_app", notification, preferences, _at(12)) is None


def test_disabled_type_blocks_every_channel() -> None:
    preferences = NotificationPreferences(
        user_id="user-1",
        types={"care_plan_updated": TypePreference(enabled=False)},
    )

    assert eligible_channels(_notification(["in_app", "email"]), preferences, _at(12)) == []


def test_only_requested_channels_are_considered() -> None:
    preferences = NotificationPreferences(user_id="user-1")

    assert eligible_channels(_notification(["sms"]), preferences, _at(12)) == ["sms"]
