"""Bus entry points of the application."""

from .subscriber import (
    DomainEventSubscriber,
    MalformedEventError,
    SubscriberStats,
    register_subscribers,
)

__all__ = [
    "DomainEventSubscriber",
    "MalformedEventError",
    "SubscriberStats",
    "register_subscribers",
]
