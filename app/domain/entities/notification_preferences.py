"""Domain entities describing per-user notification preferences."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, time

from app.domain.exceptions import ValidationError

from .notification import CHANNELS, NOTIFICATION_TYPES

DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "07:00"
DEFAULT_QUIET_HOURS_TIMEZONE = "UTC"

_WALL_CLOCK_PATTERN = re.compile(r"^(?P<hour>[01]\d|2[0-3]):(?P<minute>[0-5]\d)$")


def parse_wall_clock(value: str) -> time:
    """Parse a 24h ``HH:MM`` string into a :class:`datetime.time`."""

    match = _WALL_CLOCK_PATTERN.match(value or "")
    if not match:
        raise ValidationError(f"'{value}' is not a valid HH:MM time")
    return time(int(match.group("hour")), int(match.group("minute")))


@dataclass
class QuietHours:
    """Daily window during which email and SMS delivery is suppressed."""

    enabled: bool = False
    start: str = DEFAULT_QUIET_HOURS_START
    end: str = DEFAULT_QUIET_HOURS_END
    timezone: str = DEFAULT_QUIET_HOURS_TIMEZONE

    def validate(self) -> None:
        parse_wall_clock(self.start)
        parse_wall_clock(self.end)
        if not (self.timezone or "").strip():
            raise ValidationError("Quiet hours timezone is required")


@dataclass
class TypePreference:
    """Override for a single notification type."""

    enabled: bool = True
    channels: list[str] = field(default_factory=list)

    def allows(self, channel: str) -> bool:
        """Return ``True`` when ``channel`` may be used for this type."""

        if not self.enabled:
            return False
        return not self.channels or channel in self.channels


@dataclass
class NotificationPreferences:
    """Channel toggles, type overrides and quiet hours for one user."""

    user_id: str
    channels: dict[str, bool] = field(
        default_factory=lambda: {channel: True for channel in CHANNELS}
    )
    types: dict[str, TypePreference] = field(default_factory=dict)
    quiet_hours: QuietHours = field(default_factory=QuietHours)
    updated_at: datetime | None = None

    def channel_enabled(self, channel: str) -> bool:
        return self.channels.get(channel, True)


def default_preferences(user_id: str) -> NotificationPreferences:
    """Return the preferences assigned to users that never configured them."""

    return NotificationPreferences(user_id=user_id)


def validate_channel_names(channels: list[str] | tuple[str, ...]) -> None:
    unknown = [channel for channel in channels if channel not in CHANNELS]
    if unknown:
        raise ValidationError(f"Unknown channel(s): {', '.join(unknown)}")


def validate_type_names(types: list[str] | tuple[str, ...]) -> None:
    unknown = [name for name in types if name not in NOTIFICATION_TYPES]
    if unknown:
        raise ValidationError(f"Unknown notification type(s): {', '.join(unknown)}")


__all__ = [
    "DEFAULT_QUIET_HOURS_END",
    "DEFAULT_QUIET_HOURS_START",
    "DEFAULT_QUIET_HOURS_TIMEZONE",
    "NotificationPreferences",
    "QuietHours",
    "TypePreference",
    "default_preferences",
    "parse_wall_clock",
    "validate_channel_names",
    "validate_type_names",
]
