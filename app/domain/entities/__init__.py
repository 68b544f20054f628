"""Domain entities exposed by the application."""

from .delivery_result import DeliveryResult
from .notification import (
    CATEGORIES,
    CHANNELS,
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_SMS,
    DEFAULT_CHANNELS,
    MESSAGE_MAX_LENGTH,
    NOTIFICATION_TYPES,
    NOTIFICATION_TYPE_MAPPING,
    PRIORITIES,
    STATUSES,
    STATUS_DELIVERED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_READ,
    STATUS_SENT,
    TITLE_MAX_LENGTH,
    UNREAD_STATUSES,
    Notification,
    category_for_type,
    default_priority_for_type,
    normalize_channels,
    statuses_leading_to,
)
from .notification_preferences import (
    NotificationPreferences,
    QuietHours,
    TypePreference,
    default_preferences,
    parse_wall_clock,
)
from .notification_query import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    SEARCH_MAX_LENGTH,
    NotificationFilters,
    NotificationStats,
    PaginatedResult,
)
from .notification_request import NotificationRequest
from .services_plan import PLAN_STATUSES, ServicesPlan
from .user_contact import UserContact

__all__ = [
    "CATEGORIES",
    "CHANNELS",
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_SMS",
    "DEFAULT_CHANNELS",
    "DEFAULT_PAGE_LIMIT",
    "DeliveryResult",
    "MAX_PAGE_LIMIT",
    "MESSAGE_MAX_LENGTH",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_MAPPING",
    "Notification",
    "NotificationFilters",
    "NotificationPreferences",
    "NotificationRequest",
    "NotificationStats",
    "PLAN_STATUSES",
    "PRIORITIES",
    "PaginatedResult",
    "QuietHours",
    "SEARCH_MAX_LENGTH",
    "STATUSES",
    "STATUS_DELIVERED",
    "STATUS_FAILED",
    "STATUS_PENDING",
    "STATUS_READ",
    "STATUS_SENT",
    "ServicesPlan",
    "TITLE_MAX_LENGTH",
    "TypePreference",
    "UNREAD_STATUSES",
    "UserContact",
    "category_for_type",
    "default_preferences",
    "default_priority_for_type",
    "normalize_channels",
    "parse_wall_clock",
    "statuses_leading_to",
]
