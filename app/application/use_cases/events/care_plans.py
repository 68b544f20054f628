"""Care plan events: notify the people involved and cascade plan statuses."""

from __future__ import annotations

import logging

from app.domain.entities import ServicesPlan
from app.domain.entities.notification import PRIORITY_HIGH, PRIORITY_NORMAL
from app.domain.entities.services_plan import (
    PLAN_STATUSES,
    PLAN_STATUS_ACTIVE,
    PLAN_STATUS_APPROVED,
    PLAN_STATUS_CANCELLED,
    PLAN_STATUS_COMPLETED,
    PLAN_STATUS_DRAFT,
    PLAN_STATUS_IN_REVIEW,
    PLAN_STATUS_ON_HOLD,
)
from app.domain.topics import (
    CARE_PLAN_APPROVED,
    CARE_PLAN_CREATED,
    CARE_PLAN_STATUS_CHANGED,
    CARE_PLAN_UPDATED,
)

from .context import EventHandlerContext, TopicHandler, build_request
from .schemas import (
    CarePlanApprovedEvent,
    CarePlanCreatedEvent,
    CarePlanPayload,
    CarePlanStatusChangedEvent,
    CarePlanUpdatedEvent,
)

logger = logging.getLogger(__name__)

# parent care plan status -> {services plan status: new services plan status}
SERVICES_PLAN_CASCADE: dict[str, dict[str, str]] = {
    PLAN_STATUS_APPROVED: {PLAN_STATUS_DRAFT: PLAN_STATUS_IN_REVIEW},
    PLAN_STATUS_ACTIVE: {PLAN_STATUS_APPROVED: PLAN_STATUS_ACTIVE},
    PLAN_STATUS_COMPLETED: {PLAN_STATUS_ACTIVE: PLAN_STATUS_COMPLETED},
    PLAN_STATUS_CANCELLED: {
        status: PLAN_STATUS_CANCELLED
        for status in PLAN_STATUSES
        if status != PLAN_STATUS_CANCELLED
    },
}

_HIGH_PRIORITY_STATUSES = frozenset(
    {PLAN_STATUS_ACTIVE, PLAN_STATUS_COMPLETED, PLAN_STATUS_ON_HOLD}
)

TITLE_CREATED = "New Care Plan Created"
TITLE_UPDATED = "Care Plan Update"
TITLE_APPROVED = "Care Plan Approved"
TITLE_STATUS_CHANGED = "Care Plan Status Changed"


def cascaded_status(parent_status: str, child_status: str) -> str | None:
    """Return the status a services plan moves to, or ``None`` to leave it."""

    return SERVICES_PLAN_CASCADE.get(parent_status, {}).get(child_status)


async def cascade_services_plans(
    context: EventHandlerContext, care_plan_id: str, parent_status: str
) -> list[ServicesPlan]:
    """Move the services plans of a care plan along with its new status."""

    if context.services_plans is None or parent_status not in SERVICES_PLAN_CASCADE:
        return []

    updated: list[ServicesPlan] = []
    for plan in await context.services_plans.list_by_care_plan(care_plan_id):
        target = cascaded_status(parent_status, plan.status)
        if target is None or target == plan.status:
            continue
        updated.append(await context.services_plans.update_status(plan.id, target))
        logger.info(
            "Services plan %s moved from %s to %s after care plan %s became %s",
            plan.id,
            plan.status,
            target,
            care_plan_id,
            parent_status,
        )
    return updated


def _message(care_plan: CarePlanPayload) -> str:
    return f'Your care plan "{care_plan.title}" has been updated. Please review the changes.'


async def _notify(
    context: EventHandlerContext,
    user_id: str,
    notification_type: str,
    title: str,
    care_plan: CarePlanPayload,
    *,
    priority: str | None = None,
) -> None:
    await context.notify(
        build_request(
            user_id,
            notification_type,
            title,
            _message(care_plan),
            priority=priority,
            data={"carePlanId": care_plan.id},
        )
    )


async def handle_care_plan_created(
    context: EventHandlerContext, event: CarePlanCreatedEvent
) -> None:
    care_plan = event.care_plan
    await _notify(context, care_plan.client_id, "care_plan_created", TITLE_CREATED, care_plan)
    if care_plan.created_by_id and care_plan.created_by_id != care_plan.client_id:
        await _notify(
            context, care_plan.created_by_id, "care_plan_created", TITLE_CREATED, care_plan
        )


async def handle_care_plan_updated(
    context: EventHandlerContext, event: CarePlanUpdatedEvent
) -> None:
    care_plan = event.care_plan
    await _notify(context, care_plan.client_id, "care_plan_updated", TITLE_UPDATED, care_plan)
    if event.updated_by_id and event.updated_by_id != care_plan.client_id:
        await _notify(
            context, event.updated_by_id, "care_plan_updated", TITLE_UPDATED, care_plan
        )
    await cascade_services_plans(context, care_plan.id, care_plan.status)


async def handle_care_plan_approved(
    context: EventHandlerContext, event: CarePlanApprovedEvent
) -> None:
    care_plan = event.care_plan
    await _notify(
        context,
        care_plan.client_id,
        "care_plan_approved",
        TITLE_APPROVED,
        care_plan,
        priority=PRIORITY_HIGH,
    )
    if event.approved_by_id and event.approved_by_id != care_plan.client_id:
        await _notify(
            context,
            event.approved_by_id,
            "care_plan_approved",
            TITLE_APPROVED,
            care_plan,
            priority=PRIORITY_NORMAL,
        )
    await cascade_services_plans(context, care_plan.id, care_plan.status)


async def handle_care_plan_status_changed(
    context: EventHandlerContext, event: CarePlanStatusChangedEvent
) -> None:
    care_plan = event.care_plan
    priority = PRIORITY_HIGH if event.new_status in _HIGH_PRIORITY_STATUSES else PRIORITY_NORMAL
    await _notify(
        context,
        care_plan.client_id,
        "care_plan_status_changed",
        TITLE_STATUS_CHANGED,
        care_plan,
        priority=priority,
    )
    if care_plan.created_by_id and care_plan.created_by_id != care_plan.client_id:
        await _notify(
            context,
            care_plan.created_by_id,
            "care_plan_status_changed",
            TITLE_STATUS_CHANGED,
            care_plan,
            priority=PRIORITY_NORMAL,
        )
    await cascade_services_plans(context, care_plan.id, event.new_status)


HANDLERS: dict[str, TopicHandler] = {
    CARE_PLAN_CREATED: TopicHandler(CarePlanCreatedEvent, handle_care_plan_created),
    CARE_PLAN_UPDATED: TopicHandler(CarePlanUpdatedEvent, handle_care_plan_updated),
    CARE_PLAN_APPROVED: TopicHandler(CarePlanApprovedEvent, handle_care_plan_approved),
    CARE_PLAN_STATUS_CHANGED: TopicHandler(
        CarePlanStatusChangedEvent, handle_care_plan_status_changed
    ),
}


__all__ = [
    "HANDLERS",
    "SERVICES_PLAN_CASCADE",
    "cascade_services_plans",
    "cascaded_status",
    "handle_care_plan_approved",
    "handle_care_plan_created",
    "handle_care_plan_status_changed",
    "handle_care_plan_updated",
]
