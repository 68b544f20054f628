"""Repository implementations for infrastructure layer."""

from .notification_preferences_repository import NotificationPreferencesRepository
from .notification_repository import NotificationRepository
from .services_plan_repository import ServicesPlanRepository
from .stores import (
    SqlContactDirectory,
    SqlNotificationStore,
    SqlPreferencesStore,
    SqlServicesPlanStore,
)
from .user_contact_repository import UserContactRepository

__all__ = [
    "NotificationPreferencesRepository",
    "NotificationRepository",
    "ServicesPlanRepository",
    "SqlContactDirectory",
    "SqlNotificationStore",
    "SqlPreferencesStore",
    "SqlServicesPlanStore",
    "UserContactRepository",
]
