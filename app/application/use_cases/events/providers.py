"""Provider events: drop stale cached data and notify the provider."""

from __future__ import annotations

import logging

from app.domain.topics import (
    PROVIDER_AVAILABILITY_UPDATED,
    PROVIDER_PROFILE_UPDATED,
    PROVIDER_REVIEW_SUBMITTED,
    PROVIDER_SERVICE_AREA_UPDATED,
)

from .context import EventHandlerContext, TopicHandler, build_request
from .schemas import (
    ProviderAvailabilityUpdatedEvent,
    ProviderProfileUpdatedEvent,
    ProviderReviewSubmittedEvent,
    ProviderServiceAreaUpdatedEvent,
)

logger = logging.getLogger(__name__)


async def _invalidate(context: EventHandlerContext, provider_id: str) -> None:
    if context.provider_cache is not None:
        await context.provider_cache.invalidate_provider(provider_id)


async def handle_provider_profile_updated(
    context: EventHandlerContext, event: ProviderProfileUpdatedEvent
) -> None:
    await _invalidate(context, event.provider_id)
    await context.notify(
        build_request(
            event.user_id,
            "provider_profile_updated",
            "Your profile has been updated",
            "Your provider profile has been updated. Please review the changes.",
            data={"providerId": event.provider_id},
        )
    )


async def handle_provider_availability_updated(
    context: EventHandlerContext, event: ProviderAvailabilityUpdatedEvent
) -> None:
    await _invalidate(context, event.provider_id)
    logger.debug("Availability of provider %s changed", event.provider_id)


async def handle_provider_review_submitted(
    context: EventHandlerContext, event: ProviderReviewSubmittedEvent
) -> None:
    await _invalidate(context, event.provider_id)
    message = f"You have received a new review from a client. Rating: {event.rating}"
    if event.comment:
        message += f", Comment: {event.comment}"
    await context.notify(
        build_request(
            event.provider_user_id or event.provider_id,
            "provider_review_submitted",
            "You have a new review",
            message,
            data={
                "reviewId": event.review_id,
                "providerId": event.provider_id,
                "clientId": event.client_id,
                "rating": event.rating,
            },
        )
    )


async def handle_provider_service_area_updated(
    context: EventHandlerContext, event: ProviderServiceAreaUpdatedEvent
) -> None:
    await _invalidate(context, event.provider_id)
    logger.debug("Service area of provider %s changed", event.provider_id)


HANDLERS: dict[str, TopicHandler] = {
    PROVIDER_PROFILE_UPDATED: TopicHandler(
        ProviderProfileUpdatedEvent, handle_provider_profile_updated
    ),
    PROVIDER_AVAILABILITY_UPDATED: TopicHandler(
        ProviderAvailabilityUpdatedEvent, handle_provider_availability_updated
    ),
    PROVIDER_REVIEW_SUBMITTED: TopicHandler(
        ProviderReviewSubmittedEvent, handle_provider_review_submitted
    ),
    PROVIDER_SERVICE_AREA_UPDATED: TopicHandler(
        ProviderServiceAreaUpdatedEvent, handle_provider_service_area_updated
    ),
}


__all__ = [
    "HANDLERS",
    "handle_provider_availability_updated",
    "handle_provider_profile_updated",
    "handle_provider_review_submitted",
    "handle_provider_service_area_updated",
]
