"""Domain entity representing a services plan attached to a care plan."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

PLAN_STATUS_DRAFT = "DRAFT"
PLAN_STATUS_IN_REVIEW = "IN_REVIEW"
PLAN_STATUS_APPROVED = "APPROVED"
PLAN_STATUS_ACTIVE = "ACTIVE"
PLAN_STATUS_ON_HOLD = "ON_HOLD"
PLAN_STATUS_COMPLETED = "COMPLETED"
PLAN_STATUS_CANCELLED = "CANCELLED"

PLAN_STATUSES: tuple[str, ...] = (
    PLAN_STATUS_DRAFT,
    PLAN_STATUS_IN_REVIEW,
    PLAN_STATUS_APPROVED,
    PLAN_STATUS_ACTIVE,
    PLAN_STATUS_ON_HOLD,
    PLAN_STATUS_COMPLETED,
    PLAN_STATUS_CANCELLED,
)


@dataclass
class ServicesPlan:
    """Services plan whose status follows its parent care plan."""

    id: str
    care_plan_id: str
    client_id: str
    title: str
    status: str
    updated_at: datetime | None = None


__all__ = [
    "PLAN_STATUSES",
    "PLAN_STATUS_ACTIVE",
    "PLAN_STATUS_APPROVED",
    "PLAN_STATUS_CANCELLED",
    "PLAN_STATUS_COMPLETED",
    "PLAN_STATUS_DRAFT",
    "PLAN_STATUS_IN_REVIEW",
    "PLAN_STATUS_ON_HOLD",
    "ServicesPlan",
]
