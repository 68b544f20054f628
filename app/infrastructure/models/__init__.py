"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .notification_preferences import NotificationPreferencesModel
from .services_plan import ServicesPlanModel
from .user_contact import UserContactModel

__all__ = [
    "NotificationModel",
    "NotificationPreferencesModel",
    "ServicesPlanModel",
    "UserContactModel",
]
