"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import JSON, Boolean, Column, DateTime, String

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationPreferencesModel(Base):
    """Channel toggles, type overrides and quiet hours of a single user."""

    __tablename__ = "notification_preferences"

    user_id = Column(String(64), primary_key=True)
    channels = Column(JSON, nullable=False, default=dict)
    types = Column(JSON, nullable=False, default=dict)
    quiet_hours_enabled = Column(Boolean, nullable=False, default=False)
    quiet_hours_start = Column(String(5), nullable=False, default="22:00")
    quiet_hours_end = Column(String(5), nullable=False, default="07:00")
    quiet_hours_timezone = Column(String(64), nullable=False, default="UTC")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationPreferencesModel"]
