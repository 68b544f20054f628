"""Notification engine and the pure rules it relies on."""

from .eligibility import channel_skip_reason, eligible_channels, is_within_quiet_hours
from .engine import NotificationEngine, ensure_owner
from .observers import BaseLifecycleObserver, NotificationLifecycleObserver
from .preferences_cache import PreferencesCache

__all__ = [
    "BaseLifecycleObserver",
    "NotificationEngine",
    "NotificationLifecycleObserver",
    "PreferencesCache",
    "channel_skip_reason",
    "eligible_channels",
    "ensure_owner",
    "is_within_quiet_hours",
]
