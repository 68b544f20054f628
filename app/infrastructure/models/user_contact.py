"""SQLAlchemy model storing email and phone contacts per user."""

from sqlalchemy import Column, String

from app.infrastructure.database import Base


class UserContactModel(Base):
    """Addresses used by the email and SMS channels."""

    __tablename__ = "user_contact"

    user_id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)


__all__ = ["UserContactModel"]
