"""Services plan events: notify the client the plan belongs to."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import CHANNEL_IN_APP, ServicesPlan
from app.domain.entities.notification import PRIORITY_HIGH
from app.domain.exceptions import NotFoundError
from app.domain.topics import (
    SERVICES_PLAN_APPROVED,
    SERVICES_PLAN_CREATED,
    SERVICES_PLAN_STATUS_CHANGED,
    SERVICES_PLAN_UPDATED,
)

from .context import EventHandlerContext, TopicHandler, build_request
from .schemas import (
    ServicesPlanApprovedEvent,
    ServicesPlanCreatedEvent,
    ServicesPlanStatusChangedEvent,
    ServicesPlanUpdatedEvent,
)

logger = logging.getLogger(__name__)


async def _load_plan(context: EventHandlerContext, plan_id: str) -> ServicesPlan:
    if context.services_plans is None:
        raise NotFoundError("No services plan store configured")
    plan = await context.services_plans.find_by_id(plan_id)
    if plan is None:
        raise NotFoundError(f"Services plan {plan_id} not found")
    return plan


async def _notify(
    context: EventHandlerContext,
    plan: ServicesPlan,
    notification_type: str,
    title: str,
    message: str,
    *,
    priority: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    data = {"servicesPlanId": plan.id, "servicesPlanTitle": plan.title}
    data.update(extra or {})
    await context.notify(
        build_request(
            plan.client_id,
            notification_type,
            title,
            message,
            priority=priority,
            channels=[CHANNEL_IN_APP],
            data=data,
        )
    )


async def handle_services_plan_created(
    context: EventHandlerContext, event: ServicesPlanCreatedEvent
) -> None:
    plan = await _load_plan(context, event.services_plan_id)
    await _notify(
        context,
        plan,
        "service_plan_created",
        "New Services Plan Created",
        f'A new services plan "{plan.title}" has been created for you.',
    )


async def handle_services_plan_updated(
    context: EventHandlerContext, event: ServicesPlanUpdatedEvent
) -> None:
    plan = await _load_plan(context, event.services_plan_id)
    await _notify(
        context,
        plan,
        "service_plan_updated",
        "Services Plan Updated",
        f'Services plan "{plan.title}" has been updated.',
        extra={"updatedBy": event.updated_by},
    )


async def handle_services_plan_approved(
    context: EventHandlerContext, event: ServicesPlanApprovedEvent
) -> None:
    plan = await _load_plan(context, event.services_plan_id)
    await _notify(
        context,
        plan,
        "service_plan_approved",
        "Services Plan Approved",
        f'Services plan "{plan.title}" has been approved.',
        priority=PRIORITY_HIGH,
        extra={"approvedBy": event.approved_by},
    )


async def handle_services_plan_status_changed(
    context: EventHandlerContext, event: ServicesPlanStatusChangedEvent
) -> None:
    if event.old_status == event.new_status:
        logger.debug("Services plan %s status unchanged", event.services_plan_id)
        return
    plan = await _load_plan(context, event.services_plan_id)
    await _notify(
        context,
        plan,
        "service_plan_status_changed",
        "Services Plan Status Changed",
        f'Services plan "{plan.title}" status changed to {event.new_status}.',
        extra={"oldStatus": event.old_status, "newStatus": event.new_status},
    )


HANDLERS: dict[str, TopicHandler] = {
    SERVICES_PLAN_CREATED: TopicHandler(ServicesPlanCreatedEvent, handle_services_plan_created),
    SERVICES_PLAN_UPDATED: TopicHandler(ServicesPlanUpdatedEvent, handle_services_plan_updated),
    SERVICES_PLAN_APPROVED: TopicHandler(
        ServicesPlanApprovedEvent, handle_services_plan_approved
    ),
    SERVICES_PLAN_STATUS_CHANGED: TopicHandler(
        ServicesPlanStatusChangedEvent, handle_services_plan_status_changed
    ),
}


__all__ = [
    "HANDLERS",
    "handle_services_plan_approved",
    "handle_services_plan_created",
    "handle_services_plan_status_changed",
    "handle_services_plan_updated",
]
