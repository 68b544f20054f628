"""Domain event handlers that turn bus events into notifications."""

from . import auth, care_plans, documents, notifications, providers, services_plans
from .context import EventHandlerContext, RealtimeRelay, TopicHandler, build_request, clip

DOMAIN_HANDLERS: dict[str, TopicHandler] = {
    **care_plans.HANDLERS,
    **services_plans.HANDLERS,
    **documents.HANDLERS,
    **providers.HANDLERS,
    **auth.HANDLERS,
}
RELAY_HANDLERS: dict[str, TopicHandler] = dict(notifications.HANDLERS)
ALL_HANDLERS: dict[str, TopicHandler] = {**DOMAIN_HANDLERS, **RELAY_HANDLERS}

__all__ = [
    "ALL_HANDLERS",
    "DOMAIN_HANDLERS",
    "EventHandlerContext",
    "RELAY_HANDLERS",
    "RealtimeRelay",
    "TopicHandler",
    "build_request",
    "clip",
]
