"""Request payload used to create notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class NotificationRequest:
    """Fields supplied by callers when asking for a new notification.

    ``category``, ``priority`` and ``channels`` are optional; the engine derives
    them from ``type`` when omitted.
    """

    user_id: str
    type: str
    title: str
    message: str
    priority: str | None = None
    category: str | None = None
    channels: list[str] | None = None
    data: dict[str, Any] | None = None


__all__ = ["NotificationRequest"]
