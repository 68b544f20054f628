"""Error types raised by the notification domain."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for every notification service error."""


class ValidationError(NotificationError, ValueError):
    """Raised when a request carries missing or malformed fields."""


class InvalidTransitionError(ValidationError):
    """Raised when a notification status change is not allowed."""


class NotFoundError(NotificationError, LookupError):
    """Raised when an identifier does not match a stored record."""


class NotificationPermissionError(NotificationError, PermissionError):
    """Raised when a user acts on a notification owned by someone else."""


class DeliveryError(NotificationError, RuntimeError):
    """Raised by delivery adapters; captured into a failed delivery result."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientBusError(NotificationError, RuntimeError):
    """Raised when publishing to or subscribing on the event bus fails."""


__all__ = [
    "DeliveryError",
    "InvalidTransitionError",
    "NotFoundError",
    "NotificationError",
    "NotificationPermissionError",
    "TransientBusError",
    "ValidationError",
]
