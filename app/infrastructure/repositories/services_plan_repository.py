"""Persistence helpers for services plans."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import ServicesPlan
from app.infrastructure.models import ServicesPlanModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class ServicesPlanRepository:
    """Query services plans and update their status."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, plan_id: str) -> ServicesPlan | None:
        model = self.session.get(ServicesPlanModel, plan_id)
        return self._to_entity(model) if model is not None else None

    def list_by_care_plan(self, care_plan_id: str) -> Sequence[ServicesPlan]:
        query = (
            self.session.query(ServicesPlanModel)
            .filter(ServicesPlanModel.care_plan_id == care_plan_id)
            .order_by(ServicesPlanModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def update_status(
        self, plan_id: str, status: str, *, updated_at: datetime | None = None
    ) -> ServicesPlan:
        model = self.session.get(ServicesPlanModel, plan_id)
        if model is None:
            msg = f"Services plan with id {plan_id} not found"
            raise ValueError(msg)
        model.status = status
        model.updated_at = ensure_app_naive_datetime(updated_at or now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def create(self, plan: ServicesPlan) -> ServicesPlan:
        model = ServicesPlanModel(
            id=plan.id,
            care_plan_id=plan.care_plan_id,
            client_id=plan.client_id,
            title=plan.title,
            status=plan.status,
            updated_at=ensure_app_naive_datetime(plan.updated_at),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ServicesPlanModel) -> ServicesPlan:
        return ServicesPlan(
            id=model.id,
            care_plan_id=model.care_plan_id,
            client_id=model.client_id,
            title=model.title,
            status=model.status,
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["ServicesPlanRepository"]
