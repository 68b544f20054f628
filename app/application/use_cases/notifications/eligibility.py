"""Pure channel eligibility rules evaluated before delivery."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from app.domain.entities import (
    CHANNELS,
    CHANNEL_IN_APP,
    Notification,
    NotificationPreferences,
    QuietHours,
    parse_wall_clock,
)
from app.utils import resolve_timezone

logger = logging.getLogger(__name__)

# Channels that keep delivering while quiet hours are active.
QUIET_HOURS_EXEMPT_CHANNELS: frozenset[str] = frozenset({CHANNEL_IN_APP})


def is_within_quiet_hours(quiet_hours: QuietHours, now: datetime) -> bool:
    """Return ``True`` when ``now`` falls inside the quiet hours window.

    Both boundaries are inclusive instants: for 09:00-17:00 both 09:00:00 and
    17:00:00 are quiet but 17:00:01 is not. When ``start`` is later than ``end``
    the window spans midnight and a time matches if it is at or after ``start``
    or at or before ``end``.
    A window that cannot be evaluated never blocks delivery.
    """

    if not quiet_hours.enabled:
        return False

    try:
        start = parse_wall_clock(quiet_hours.start)
        end = parse_wall_clock(quiet_hours.end)
        tz = resolve_timezone(quiet_hours.timezone)
    except ValueError as exc:
        logger.warning("Ignoring invalid quiet hours %s: %s", quiet_hours, exc)
        return False

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_time = now.astimezone(tz).time()

    if start <= end:
        return start <= local_time <= end
    return local_time >= start or local_time <= end


def channel_skip_reason(
    channel: str,
    notification: Notification,
    preferences: NotificationPreferences,
    now: datetime,
) -> str | None:
    """Return why ``channel`` must be skipped, or ``None`` when it is eligible."""

    if not preferences.channel_enabled(channel):
        return "channel_disabled"

    type_preference = preferences.types.get(notification.type)
    if type_preference is not None and not type_preference.allows(channel):
        return "type_disabled"

    if channel not in QUIET_HOURS_EXEMPT_CHANNELS and is_within_quiet_hours(
        preferences.quiet_hours, now
    ):
        return "quiet_hours"

    return None


def eligible_channels(
    notification: Notification,
    preferences: NotificationPreferences,
    now: datetime,
) -> list[str]:
    """Return the requested channels that may be attempted, in dispatch order."""

    eligible: list[str] = []
    for channel in CHANNELS:
        if channel not in notification.channels:
            continue
        reason = channel_skip_reason(channel, notification, preferences, now)
        if reason is not None:
            logger.debug(
                "Skipping %s for notification %s: %s", channel, notification.id, reason
            )
            continue
        eligible.append(channel)
    return eligible


__all__ = [
    "QUIET_HOURS_EXEMPT_CHANNELS",
    "channel_skip_reason",
    "eligible_channels",
    "is_within_quiet_hours",
]
