"""Pydantic models describing the payload of every subscribed topic."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PlanStatus = Literal[
    "DRAFT",
    "IN_REVIEW",
    "APPROVED",
    "ACTIVE",
    "ON_HOLD",
    "COMPLETED",
    "CANCELLED",
]


class EventModel(BaseModel):
    """Base for bus payloads; fields travel camelCased on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class DomainEvent(EventModel):
    event_id: str | None = None


# Care plans -----------------------------------------------------------------


class CarePlanPayload(EventModel):
    id: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    created_by_id: str | None = None
    title: str = Field(min_length=1)
    status: PlanStatus


class CarePlanCreatedEvent(DomainEvent):
    care_plan: CarePlanPayload


class CarePlanUpdatedEvent(DomainEvent):
    care_plan: CarePlanPayload
    updated_by_id: str | None = None


class CarePlanApprovedEvent(DomainEvent):
    care_plan: CarePlanPayload
    approved_by_id: str | None = None


class CarePlanStatusChangedEvent(DomainEvent):
    care_plan: CarePlanPayload
    new_status: PlanStatus
    previous_status: PlanStatus | None = None


# Services plans -------------------------------------------------------------


class ServicesPlanCreatedEvent(DomainEvent):
    services_plan_id: str = Field(min_length=1)


class ServicesPlanUpdatedEvent(DomainEvent):
    services_plan_id: str = Field(min_length=1)
    updated_by: str = Field(min_length=1)


class ServicesPlanApprovedEvent(DomainEvent):
    services_plan_id: str = Field(min_length=1)
    approved_by: str = Field(min_length=1)


class ServicesPlanStatusChangedEvent(DomainEvent):
    services_plan_id: str = Field(min_length=1)
    old_status: PlanStatus
    new_status: PlanStatus


# Documents ------------------------------------------------------------------


class DocumentUploadedEvent(DomainEvent):
    document_id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    document_name: str = Field(min_length=1)
    document_type: str | None = None


class DocumentAnalyzedEvent(DomainEvent):
    document_id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    document_name: str = Field(min_length=1)
    document_type: str | None = None
    analysis_id: str = Field(min_length=1)
    status: Literal["pending", "processing", "completed", "failed"]


class DocumentStatusChangedEvent(DomainEvent):
    document_id: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    document_name: str = Field(min_length=1)
    previous_status: str | None = None
    new_status: str = Field(min_length=1)


# Providers ------------------------------------------------------------------


class ProviderProfileUpdatedEvent(DomainEvent):
    provider_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)


class ProviderAvailabilityUpdatedEvent(DomainEvent):
    provider_id: str = Field(min_length=1)


class ProviderReviewSubmittedEvent(DomainEvent):
    review_id: str = Field(min_length=1)
    provider_id: str = Field(min_length=1)
    provider_user_id: str | None = None
    client_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class ProviderServiceAreaUpdatedEvent(DomainEvent):
    provider_id: str = Field(min_length=1)


# Accounts -------------------------------------------------------------------


class UserPayload(EventModel):
    id: str = Field(min_length=1)
    first_name: str | None = None


class UserEvent(DomainEvent):
    user: UserPayload


class PasswordResetRequestedEvent(UserEvent):
    reset_token: str = Field(min_length=1)


class LoginEvent(UserEvent):
    ip_address: str | None = None
    device: str | None = None


# Notification lifecycle -----------------------------------------------------


class NotificationRelayEvent(DomainEvent):
    origin: str | None = None
    notification_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    notification: dict


class NotificationsAllReadEvent(DomainEvent):
    origin: str | None = None
    user_id: str = Field(min_length=1)
    count: int = Field(ge=0)
    read_at: str | None = None


__all__ = [
    "CarePlanApprovedEvent",
    "CarePlanCreatedEvent",
    "CarePlanPayload",
    "CarePlanStatusChangedEvent",
    "CarePlanUpdatedEvent",
    "DocumentAnalyzedEvent",
    "DocumentStatusChangedEvent",
    "DocumentUploadedEvent",
    "DomainEvent",
    "EventModel",
    "LoginEvent",
    "NotificationRelayEvent",
    "NotificationsAllReadEvent",
    "PasswordResetRequestedEvent",
    "PlanStatus",
    "ProviderAvailabilityUpdatedEvent",
    "ProviderProfileUpdatedEvent",
    "ProviderReviewSubmittedEvent",
    "ProviderServiceAreaUpdatedEvent",
    "ServicesPlanApprovedEvent",
    "ServicesPlanCreatedEvent",
    "ServicesPlanStatusChangedEvent",
    "ServicesPlanUpdatedEvent",
    "UserEvent",
    "UserPayload",
]
