"""Aggregate application use cases."""

from .notifications import NotificationEngine, ensure_owner

__all__ = ["NotificationEngine", "ensure_owner"]
