"""SQLAlchemy model for services plans linked to care plans."""

from sqlalchemy import Column, DateTime, String

from app.infrastructure.database import Base


class ServicesPlanModel(Base):
    """Services plan row; only the fields needed for status cascades."""

    __tablename__ = "services_plan"

    id = Column(String(64), primary_key=True)
    care_plan_id = Column(String(64), nullable=False, index=True)
    client_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["ServicesPlanModel"]
