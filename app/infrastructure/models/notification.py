"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import JSON, Column, DateTime, Index, String, Text

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
        Index("ix_notification_user_status", "user_id", "status"),
    )

    id = Column(String(32), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    category = Column(String(30), nullable=False)
    priority = Column(String(10), nullable=False)
    title = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    channels = Column(JSON, nullable=False, default=list)
    status = Column(String(15), nullable=False, default="pending")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    sent_at = Column(DateTime(), nullable=True)
    read_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
