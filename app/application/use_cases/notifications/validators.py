"""Validation helpers for notification use cases."""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.entities import (
    CATEGORIES,
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    MESSAGE_MAX_LENGTH,
    NOTIFICATION_TYPES,
    PRIORITIES,
    SEARCH_MAX_LENGTH,
    STATUSES,
    TITLE_MAX_LENGTH,
    NotificationFilters,
    NotificationRequest,
    QuietHours,
    TypePreference,
)
from app.domain.entities.notification_preferences import (
    validate_channel_names,
    validate_type_names,
)
from app.domain.exceptions import ValidationError
from app.utils import resolve_timezone


def _require_text(value: Any, field_name: str, *, max_length: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    normalized = value.strip()
    if max_length is not None and len(normalized) > max_length:
        raise ValidationError(
            f"{field_name} must be at most {max_length} characters long"
        )
    return normalized


def ensure_valid_request(request: NotificationRequest) -> NotificationRequest:
    """Return a normalized copy of ``request`` or raise ``ValidationError``."""

    user_id = _require_text(request.user_id, "user_id")
    notification_type = _require_text(request.type, "type")
    if notification_type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Unknown notification type '{notification_type}'")
    title = _require_text(request.title, "title", max_length=TITLE_MAX_LENGTH)
    message = _require_text(request.message, "message", max_length=MESSAGE_MAX_LENGTH)

    if request.priority is not None and request.priority not in PRIORITIES:
        raise ValidationError(f"Unknown priority '{request.priority}'")
    if request.category is not None and request.category not in CATEGORIES:
        raise ValidationError(f"Unknown category '{request.category}'")
    if request.channels is not None:
        validate_channel_names(request.channels)
    if request.data is not None and not isinstance(request.data, dict):
        raise ValidationError("data must be an object")

    return NotificationRequest(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        priority=request.priority,
        category=request.category,
        channels=list(request.channels) if request.channels else None,
        data=request.data,
    )


def ensure_valid_filters(filters: NotificationFilters | None) -> NotificationFilters:
    filters = filters or NotificationFilters()
    if filters.type is not None and filters.type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Unknown notification type '{filters.type}'")
    if filters.category is not None and filters.category not in CATEGORIES:
        raise ValidationError(f"Unknown category '{filters.category}'")
    if filters.status is not None and filters.status not in STATUSES:
        raise ValidationError(f"Unknown status '{filters.status}'")
    if filters.priority is not None and filters.priority not in PRIORITIES:
        raise ValidationError(f"Unknown priority '{filters.priority}'")
    if filters.search is not None and len(filters.search) > SEARCH_MAX_LENGTH:
        raise ValidationError(
            f"search must be at most {SEARCH_MAX_LENGTH} characters long"
        )
    if (
        filters.start_date is not None
        and filters.end_date is not None
        and filters.start_date > filters.end_date
    ):
        raise ValidationError("start_date must not be after end_date")
    return filters


def ensure_valid_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Return a ``(page, limit)`` pair clamped to the supported range."""

    page = page or 1
    limit = limit or DEFAULT_PAGE_LIMIT
    if page < 1:
        raise ValidationError("page must be greater than or equal to 1")
    if limit < 1:
        raise ValidationError("limit must be greater than or equal to 1")
    return page, min(limit, MAX_PAGE_LIMIT)


def parse_quiet_hours(value: Mapping[str, Any] | QuietHours) -> QuietHours:
    if isinstance(value, QuietHours):
        quiet_hours = value
    elif isinstance(value, Mapping):
        defaults = QuietHours()
        quiet_hours = QuietHours(
            enabled=bool(value.get("enabled", defaults.enabled)),
            start=str(value.get("start", defaults.start)),
            end=str(value.get("end", defaults.end)),
            timezone=str(value.get("timezone", defaults.timezone)),
        )
    else:
        raise ValidationError("quiet_hours must be an object")
    quiet_hours.validate()
    try:
        resolve_timezone(quiet_hours.timezone)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    return quiet_hours


def parse_type_preference(value: Mapping[str, Any] | TypePreference) -> TypePreference:
    if isinstance(value, TypePreference):
        preference = value
    elif isinstance(value, Mapping):
        channels = value.get("channels") or []
        if not isinstance(channels, (list, tuple)):
            raise ValidationError("type channels must be a list")
        preference = TypePreference(
            enabled=bool(value.get("enabled", True)), channels=list(channels)
        )
    else:
        raise ValidationError("type preferences must be objects")
    validate_channel_names(preference.channels)
    return preference


def ensure_valid_preferences_update(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial preferences update and return its parsed fields."""

    if not isinstance(partial, Mapping):
        raise ValidationError("Preferences update must be an object")

    unknown = set(partial) - {"channels", "types", "quiet_hours"}
    if unknown:
        raise ValidationError(f"Unknown preference field(s): {', '.join(sorted(unknown))}")

    parsed: dict[str, Any] = {}
    channels = partial.get("channels")
    if channels is not None:
        if not isinstance(channels, Mapping):
            raise ValidationError("channels must be an object")
        validate_channel_names(list(channels))
        parsed["channels"] = {name: bool(enabled) for name, enabled in channels.items()}

    types = partial.get("types")
    if types is not None:
        if not isinstance(types, Mapping):
            raise ValidationError("types must be an object")
        validate_type_names(list(types))
        parsed["types"] = {
            name: parse_type_preference(value) for name, value in types.items()
        }

    quiet_hours = partial.get("quiet_hours")
    if quiet_hours is not None:
        parsed["quiet_hours"] = parse_quiet_hours(quiet_hours)

    return parsed


__all__ = [
    "ensure_valid_filters",
    "ensure_valid_page",
    "ensure_valid_preferences_update",
    "ensure_valid_request",
    "parse_quiet_hours",
    "parse_type_preference",
]
