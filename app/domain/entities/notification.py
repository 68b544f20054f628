"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.exceptions import InvalidTransitionError

CHANNEL_IN_APP = "in_app"
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"

# Dispatch order used by the engine.
CHANNELS: tuple[str, ...] = (CHANNEL_IN_APP, CHANNEL_EMAIL, CHANNEL_SMS)
DEFAULT_CHANNELS: tuple[str, ...] = (CHANNEL_IN_APP,)

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_DELIVERED = "delivered"
STATUS_READ = "read"
STATUS_FAILED = "failed"

STATUSES: tuple[str, ...] = (
    STATUS_PENDING,
    STATUS_SENT,
    STATUS_DELIVERED,
    STATUS_READ,
    STATUS_FAILED,
)
UNREAD_STATUSES: frozenset[str] = frozenset(
    {STATUS_PENDING, STATUS_SENT, STATUS_DELIVERED}
)
TERMINAL_STATUSES: frozenset[str] = frozenset({STATUS_READ, STATUS_FAILED})

_VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING: frozenset({STATUS_SENT, STATUS_DELIVERED, STATUS_READ, STATUS_FAILED}),
    STATUS_SENT: frozenset({STATUS_DELIVERED, STATUS_READ, STATUS_FAILED}),
    STATUS_DELIVERED: frozenset({STATUS_READ, STATUS_FAILED}),
    STATUS_READ: frozenset(),
    STATUS_FAILED: frozenset(),
}

PRIORITY_LOW = "low"
PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"

PRIORITIES: tuple[str, ...] = (
    PRIORITY_LOW,
    PRIORITY_NORMAL,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
)

CATEGORIES: tuple[str, ...] = (
    "appointment",
    "care_plan",
    "service_plan",
    "provider",
    "document",
    "message",
    "payment",
    "account",
    "system",
)

# type -> (category, default priority)
NOTIFICATION_TYPE_MAPPING: dict[str, tuple[str, str]] = {
    "appointment_reminder": ("appointment", PRIORITY_HIGH),
    "care_plan_created": ("care_plan", PRIORITY_NORMAL),
    "care_plan_updated": ("care_plan", PRIORITY_NORMAL),
    "care_plan_approved": ("care_plan", PRIORITY_HIGH),
    "care_plan_status_changed": ("care_plan", PRIORITY_NORMAL),
    "service_plan_created": ("service_plan", PRIORITY_NORMAL),
    "service_plan_updated": ("service_plan", PRIORITY_NORMAL),
    "service_plan_approved": ("service_plan", PRIORITY_HIGH),
    "service_plan_status_changed": ("service_plan", PRIORITY_NORMAL),
    "provider_matched": ("provider", PRIORITY_HIGH),
    "provider_availability": ("provider", PRIORITY_NORMAL),
    "provider_profile_updated": ("provider", PRIORITY_NORMAL),
    "provider_review_submitted": ("provider", PRIORITY_NORMAL),
    "document_uploaded": ("document", PRIORITY_NORMAL),
    "document_analyzed": ("document", PRIORITY_NORMAL),
    "document_status_changed": ("document", PRIORITY_NORMAL),
    "message_received": ("message", PRIORITY_HIGH),
    "payment_processed": ("payment", PRIORITY_NORMAL),
    "payment_failed": ("payment", PRIORITY_URGENT),
    "account_created": ("account", PRIORITY_NORMAL),
    "account_verified": ("account", PRIORITY_NORMAL),
    "password_reset": ("account", PRIORITY_HIGH),
    "system_update": ("system", PRIORITY_NORMAL),
}
NOTIFICATION_TYPES: tuple[str, ...] = tuple(NOTIFICATION_TYPE_MAPPING)

TITLE_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 500


def statuses_leading_to(target: str) -> frozenset[str]:
    """Return the statuses a notification may move to ``target`` from."""

    return frozenset(
        status for status, targets in _VALID_TRANSITIONS.items() if target in targets
    )


def category_for_type(notification_type: str) -> str:
    """Return the category mapped to ``notification_type``."""

    return NOTIFICATION_TYPE_MAPPING[notification_type][0]


def default_priority_for_type(notification_type: str) -> str:
    """Return the default priority mapped to ``notification_type``."""

    return NOTIFICATION_TYPE_MAPPING[notification_type][1]


def normalize_channels(channels: list[str] | tuple[str, ...] | None) -> list[str]:
    """Return ``channels`` without duplicates, falling back to the defaults."""

    ordered: list[str] = []
    for channel in channels or ():
        if channel not in ordered:
            ordered.append(channel)
    return ordered or list(DEFAULT_CHANNELS)


@dataclass
class Notification:
    """Message targeted at one user together with its delivery state."""

    id: str | None
    user_id: str
    type: str
    category: str
    priority: str
    title: str
    message: str
    data: dict[str, Any] | None = None
    channels: list[str] = field(default_factory=lambda: list(DEFAULT_CHANNELS))
    status: str = STATUS_PENDING
    created_at: datetime | None = None
    sent_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.status == STATUS_READ

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON representation sent to clients and peers."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "category": self.category,
            "priority": self.priority,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "channels": list(self.channels),
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "read_at": self.read_at.isoformat() if self.read_at else None,
        }

    def can_transition(self, target: str) -> bool:
        """Return ``True`` when moving to ``target`` is allowed."""

        return target in _VALID_TRANSITIONS.get(self.status, frozenset())

    def _assert_can_transition(self, target: str) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(
                f"Cannot move notification {self.id} from '{self.status}' to '{target}'"
            )

    def mark_sent(self, at: datetime) -> None:
        self._assert_can_transition(STATUS_SENT)
        self.status = STATUS_SENT
        if self.sent_at is None:
            self.sent_at = at

    def mark_delivered(self) -> None:
        self._assert_can_transition(STATUS_DELIVERED)
        self.status = STATUS_DELIVERED

    def mark_read(self, at: datetime) -> None:
        self._assert_can_transition(STATUS_READ)
        self.status = STATUS_READ
        self.read_at = at

    def mark_failed(self) -> None:
        if self.sent_at is not None:
            raise InvalidTransitionError(
                f"Notification {self.id} was already sent and cannot fail"
            )
        self._assert_can_transition(STATUS_FAILED)
        self.status = STATUS_FAILED


__all__ = [
    "CATEGORIES",
    "CHANNELS",
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_SMS",
    "DEFAULT_CHANNELS",
    "MESSAGE_MAX_LENGTH",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_MAPPING",
    "Notification",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_NORMAL",
    "PRIORITY_URGENT",
    "STATUSES",
    "STATUS_DELIVERED",
    "STATUS_FAILED",
    "STATUS_PENDING",
    "STATUS_READ",
    "STATUS_SENT",
    "TERMINAL_STATUSES",
    "TITLE_MAX_LENGTH",
    "UNREAD_STATUSES",
    "category_for_type",
    "default_priority_for_type",
    "normalize_channels",
    "statuses_leading_to",
]
