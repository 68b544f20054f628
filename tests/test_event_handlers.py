"""Tests for the domain event handlers, driven through the subscriber."""

from __future__ import annotations

import json
from typing import Any

import pytest

from app.application.use_cases.events import EventHandlerContext
from app.application.use_cases.events.care_plans import cascaded_status
from app.domain.topics import CARE_PLAN_GENERATION_REQUESTED
from app.interfaces.events import DomainEventSubscriber


def _care_plan(status: str = "APPROVED", **overrides: Any) -> dict[str, Any]:
    plan = {
        "id": "cp-1",
        "clientId": "client-1",
        "createdById": "manager-1",
        "title": "Recovery plan",
        "status": status,
    }
    plan.update(overrides)
    return plan


async def _deliver(
    subscriber: DomainEventSubscriber, topic: str, payload: dict[str, Any]
) -> None:
    await subscriber.handle(topic, json.dumps(payload))


async def _notifications(context: EventHandlerContext, user_id: str):
    page = await context.engine.list_for_user(user_id)
    return page.items


@pytest.fixture()
def subscriber(handler_context) -> DomainEventSubscriber:
    return DomainEventSubscriber(handler_context)


@pytest.mark.parametrize(
    ("parent", "child", "expected"),
    [
        ("APPROVED", "DRAFT", "IN_REVIEW"),
        ("APPROVED", "ACTIVE", None),
        ("ACTIVE", "APPROVED", "ACTIVE"),
        ("ACTIVE", "DRAFT", None),
        ("COMPLETED", "ACTIVE", "COMPLETED"),
        ("CANCELLED", "ON_HOLD", "CANCELLED"),
        ("CANCELLED", "CANCELLED", None),
        ("ON_HOLD", "ACTIVE", None),
    ],
)
def test_cascade_table(parent: str, child: str, expected: str | None) -> None:
    assert cascaded_status(parent, child) == expected


@pytest.mark.asyncio
async def test_care_plan_created_notifies_client_and_creator(
    subscriber, handler_context
) -> None:
    await _deliver(subscriber, "care-plan.created", {"carePlan": _care_plan("DRAFT")})

    [client_notification] = await _notifications(handler_context, "client-1")
    [manager_notification] = await _notifications(handler_context, "manager-1")
    assert client_notification.title == "New Care Plan Created"
    assert client_notification.type == "care_plan_created"
    assert client_notification.data == {"carePlanId": "cp-1"}
    assert manager_notification.type == "care_plan_created"


@pytest.mark.asyncio
async def test_care_plan_approved_notifies_and_cascades(
    subscriber, handler_context, services_plan_store, seed_services_plan
) -> None:
    seed_services_plan("sp-draft", "cp-1", "DRAFT")
    seed_services_plan("sp-active", "cp-1", "ACTIVE")
    seed_services_plan("sp-other", "cp-2", "DRAFT")

    await _deliver(
        subscriber,
        "care-plan.approved",
        {"eventId": "evt-1", "carePlan": _care_plan("APPROVED"), "approvedById": "doctor-1"},
    )

    [client_notification] = await _notifications(handler_context, "client-1")
    [approver_notification] = await _notifications(handler_context, "doctor-1")
    assert client_notification.priority == "high"
    assert client_notification.title == "Care Plan Approved"
    assert approver_notification.priority == "normal"

    assert (await services_plan_store.find_by_id("sp-draft")).status == "IN_REVIEW"
    assert (await services_plan_store.find_by_id("sp-active")).status == "ACTIVE"
    assert (await services_plan_store.find_by_id("sp-other")).status == "DRAFT"


@pytest.mark.asyncio
async def test_cancellation_cascade_is_idempotent(
    subscriber, services_plan_store, seed_services_plan
) -> None:
    seed_services_plan("sp-1", "cp-1", "ACTIVE")
    seed_services_plan("sp-2", "cp-1", "CANCELLED")
    event = {"carePlan": _care_plan("CANCELLED"), "newStatus": "CANCELLED"}

    await _deliver(subscriber, "care-plan.status-changed", {"eventId": "a", **event})
    first = await services_plan_store.list_by_care_plan("cp-1")
    await _deliver(subscriber, "care-plan.status-changed", {"eventId": "b", **event})
    second = await services_plan_store.list_by_care_plan("cp-1")

    assert [plan.status for plan in first] == ["CANCELLED", "CANCELLED"]
    assert [(plan.id, plan.status, plan.updated_at) for plan in second] == [
        (plan.id, plan.status, plan.updated_at) for plan in first
    ]
    assert subscriber.stats_for("care-plan.status-changed").processed == 2


@pytest.mark.asyncio
async def test_status_change_priority_depends_on_new_status(
    subscriber, handler_context
) -> None:
    await _deliver(
        subscriber,
        "care-plan.status-changed",
        {"carePlan": _care_plan("ON_HOLD"), "newStatus": "ON_HOLD", "previousStatus": "ACTIVE"},
    )
    await _deliver(
        subscriber,
        "care-plan.status-changed",
        {"carePlan": _care_plan("IN_REVIEW"), "newStatus": "IN_REVIEW"},
    )

    notifications = await _notifications(handler_context, "client-1")
    assert sorted(n.priority for n in notifications) == ["high", "normal"]
    assert {n.title for n in notifications} == {"Care Plan Status Changed"}


@pytest.mark.asyncio
async def test_services_plan_approved_notifies_client_in_app(
    subscriber, handler_context, adapters, seed_services_plan
) -> None:
    seed_services_plan("sp-1", "cp-1", "APPROVED", client_id="client-9")

    await _deliver(
        subscriber,
        "services-plan.approved",
        {"servicesPlanId": "sp-1", "approvedBy": "doctor-1"},
    )

    [notification] = await _notifications(handler_context, "client-9")
    assert notification.title == "Services Plan Approved"
    assert notification.message == 'Services plan "Plan sp-1" has been approved.'
    assert notification.priority == "high"
    assert notification.channels == ["in_app"]
    assert notification.data["servicesPlanId"] == "sp-1"
    assert adapters["email"].delivered == []


@pytest.mark.asyncio
async def test_unknown_services_plan_counts_as_failure(subscriber) -> None:
    await _deliver(subscriber, "services-plan.created", {"servicesPlanId": "missing"})

    stats = subscriber.stats_for("services-plan.created")
    assert stats.failed == 1
    assert stats.processed == 0


@pytest.mark.asyncio
async def test_completed_medical_record_analysis_requests_care_plan(
    subscriber, handler_context, bus
) -> None:
    await _deliver(
        subscriber,
        "document.analyzed",
        {
            "documentId": "doc-1",
            "ownerId": "client-1",
            "documentName": "labs.pdf",
            "documentType": "medical_record",
            "analysisId": "an-1",
            "status": "completed",
        },
    )

    [notification] = await _notifications(handler_context, "client-1")
    assert notification.title == "Document Analysis Complete"
    [request] = bus.payloads(CARE_PLAN_GENERATION_REQUESTED)
    assert request["documentId"] == "doc-1"
    assert request["clientId"] == "client-1"


@pytest.mark.asyncio
async def test_failed_analysis_is_high_priority_and_pending_is_ignored(
    subscriber, handler_context, bus
) -> None:
    base = {
        "documentId": "doc-1",
        "ownerId": "client-1",
        "documentName": "labs.pdf",
        "documentType": "medical_record",
        "analysisId": "an-1",
    }
    await _deliver(subscriber, "document.analyzed", {**base, "status": "processing"})
    await _deliver(subscriber, "document.analyzed", {**base, "status": "failed"})

    [notification] = await _notifications(handler_context, "client-1")
    assert notification.title == "Document Analysis Failed"
    assert notification.priority == "high"
    assert bus.payloads(CARE_PLAN_GENERATION_REQUESTED) == []


@pytest.mark.asyncio
async def test_document_status_error(subscriber, handler_context) -> None:
    await _deliver(
        subscriber,
        "document.status.changed",
        {
            "documentId": "doc-1",
            "ownerId": "client-1",
            "documentName": "scan.png",
            "previousStatus": "processing",
            "newStatus": "error",
        },
    )

    [notification] = await _notifications(handler_context, "client-1")
    assert notification.title == "Document Upload Failed"
    assert notification.priority == "high"
    assert notification.type == "document_status_changed"


@pytest.mark.asyncio
async def test_provider_review_invalidates_cache_and_notifies_provider(
    subscriber, handler_context, provider_cache
) -> None:
    await _deliver(
        subscriber,
        "provider.review.submitted",
        {
            "reviewId": "r-1",
            "providerId": "prov-1",
            "providerUserId": "user-prov-1",
            "clientId": "client-1",
            "rating": 5,
            "comment": "Great care",
        },
    )

    assert provider_cache.invalidated == ["prov-1"]
    [notification] = await _notifications(handler_context, "user-prov-1")
    assert notification.title == "You have a new review"
    assert "Rating: 5" in notification.message
    assert "Great care" in notification.message


@pytest.mark.asyncio
async def test_provider_availability_only_invalidates(
    subscriber, handler_context, provider_cache, bus
) -> None:
    await _deliver(subscriber, "provider.availability.updated", {"providerId": "prov-1"})

    assert provider_cache.invalidated == ["prov-1"]
    assert bus.published == []


@pytest.mark.asyncio
async def test_review_with_invalid_rating_is_rejected(subscriber, provider_cache) -> None:
    await _deliver(
        subscriber,
        "provider.review.submitted",
        {"reviewId": "r-1", "providerId": "prov-1", "clientId": "c", "rating": 9},
    )

    assert subscriber.stats_for("provider.review.submitted").rejected == 1
    assert provider_cache.invalidated == []


@pytest.mark.asyncio
async def test_registration_welcome_uses_email_and_in_app(
    subscriber, handler_context, adapters
) -> None:
    await _deliver(
        subscriber, "user.registered", {"user": {"id": "user-7", "firstName": "Ana"}}
    )

    [notification] = await _notifications(handler_context, "user-7")
    assert notification.title == "Welcome to Revolucare!"
    assert notification.message.startswith("Hi Ana,")
    assert notification.channels == ["email", "in_app"]
    assert len(adapters["email"].delivered) == 1


@pytest.mark.asyncio
async def test_password_reset_token_only_reaches_email(
    subscriber, handler_context, adapters, bus
) -> None:
    await _deliver(
        subscriber,
        "password.reset.requested",
        {"user": {"id": "user-7"}, "resetToken": "SECRET-TOKEN-123"},
    )

    [sent] = adapters["email"].delivered
    assert sent.user_id == "user-7"
    assert "SECRET-TOKEN-123" in sent.message
    assert adapters["in_app"].delivered == []
    assert await _notifications(handler_context, "user-7") == []
    assert all(
        "SECRET-TOKEN-123" not in json.dumps(payload, default=str)
        for _, payload in bus.published
    )


@pytest.mark.asyncio
async def test_failed_login_alert_uses_every_channel(subscriber, handler_context) -> None:
    await _deliver(
        subscriber,
        "login.attempt.failed",
        {"user": {"id": "user-7"}, "ipAddress": "10.0.0.1", "device": "Firefox"},
    )

    [notification] = await _notifications(handler_context, "user-7")
    assert notification.priority == "high"
    assert set(notification.channels) == {"email", "sms", "in_app"}
    assert "10.0.0.1" in notification.message


@pytest.mark.asyncio
async def test_login_is_only_logged(subscriber, handler_context, caplog) -> None:
    with caplog.at_level("INFO"):
        await _deliver(subscriber, "user.logged.in", {"user": {"id": "user-7"}})

    assert await _notifications(handler_context, "user-7") == []
    assert "user-7" in caplog.text


class _RecordingRelay:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def push_notification(self, user_id, payload):
        self.calls.append(("notification", user_id, payload["id"]))
        return 1

    async def push_read(self, user_id, notification_id, read_at):
        self.calls.append(("read", user_id, notification_id))
        return 1

    async def push_delivered(self, user_id, notification_id, status):
        self.calls.append(("delivered", user_id, notification_id))
        return 1

    async def push_all_read(self, user_id, count):
        self.calls.append(("all_read", user_id, count))
        return 1


@pytest.mark.asyncio
async def test_lifecycle_relay_ignores_own_origin(handler_context) -> None:
    relay = _RecordingRelay()
    handler_context.realtime = relay
    subscriber = DomainEventSubscriber(handler_context)
    notification = {"id": "n-1", "status": "read", "read_at": "2024-05-06T12:00:00+00:00"}

    await _deliver(
        subscriber,
        "notification.read",
        {"origin": "instance-a", "notificationId": "n-1", "userId": "u", "notification": notification},
    )
    await _deliver(
        subscriber,
        "notification.read",
        {"origin": "instance-b", "notificationId": "n-1", "userId": "u", "notification": notification},
    )
    await _deliver(
        subscriber,
        "notification.all-read",
        {"origin": "instance-b", "userId": "u", "count": 3},
    )

    assert relay.calls == [("read", "u", "n-1"), ("all_read", "u", 3)]
