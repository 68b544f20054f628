"""Pydantic schemas used by the API layer."""

from .notification import MAX_IDS_PER_FRAME, NotificationClientFrame

__all__ = ["MAX_IDS_PER_FRAME", "NotificationClientFrame"]
