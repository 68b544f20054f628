"""Contact details used by the email and SMS channels."""

from dataclasses import dataclass


@dataclass
class UserContact:
    """Addresses a user can be reached at outside the application."""

    user_id: str
    email: str | None
    phone: str | None
    name: str | None = None


__all__ = ["UserContact"]
