"""Value objects used to query and summarise notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .notification import Notification

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
SEARCH_MAX_LENGTH = 100


@dataclass
class NotificationFilters:
    """Optional criteria applied when listing a user's notifications."""

    type: str | None = None
    category: str | None = None
    status: str | None = None
    priority: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    search: str | None = None
    read: bool | None = None


@dataclass
class PaginatedResult:
    """One page of notifications plus totals computed by the store."""

    items: list[Notification]
    page: int
    limit: int
    total_items: int

    @property
    def total_pages(self) -> int:
        if self.total_items == 0:
            return 0
        return -(-self.total_items // self.limit)


@dataclass
class NotificationStats:
    """Aggregated counters for a user's notifications."""

    total: int = 0
    unread: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)


__all__ = [
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
    "SEARCH_MAX_LENGTH",
    "NotificationFilters",
    "NotificationStats",
    "PaginatedResult",
]
