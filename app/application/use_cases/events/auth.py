"""Account events: welcome, verification and password security notices."""

from __future__ import annotations

import logging

from app.domain.entities import CHANNEL_EMAIL, CHANNEL_IN_APP, CHANNEL_SMS
from app.domain.entities.notification import PRIORITY_HIGH
from app.domain.topics import (
    EMAIL_VERIFIED,
    LOGIN_ATTEMPT_FAILED,
    PASSWORD_RESET,
    PASSWORD_RESET_REQUESTED,
    USER_LOGGED_IN,
    USER_REGISTERED,
)

from .context import EventHandlerContext, TopicHandler, build_request
from .schemas import LoginEvent, PasswordResetRequestedEvent, UserEvent

logger = logging.getLogger(__name__)

ALL_CHANNELS = [CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_IN_APP]


async def handle_user_registered(context: EventHandlerContext, event: UserEvent) -> None:
    first_name = event.user.first_name or "there"
    await context.notify(
        build_request(
            event.user.id,
            "account_created",
            "Welcome to Revolucare!",
            f"Hi {first_name}, welcome to Revolucare! "
            "We're excited to help you manage your care.",
            channels=[CHANNEL_EMAIL, CHANNEL_IN_APP],
        )
    )


async def handle_email_verified(context: EventHandlerContext, event: UserEvent) -> None:
    await context.notify(
        build_request(
            event.user.id,
            "account_verified",
            "Email Verified!",
            "Your email address has been successfully verified.",
            channels=[CHANNEL_IN_APP],
        )
    )


async def handle_password_reset(context: EventHandlerContext, event: UserEvent) -> None:
    await context.notify(
        build_request(
            event.user.id,
            "password_reset",
            "Password Reset Confirmation",
            "Your password has been successfully reset.",
            priority=PRIORITY_HIGH,
            channels=list(ALL_CHANNELS),
        )
    )


async def handle_password_reset_requested(
    context: EventHandlerContext, event: PasswordResetRequestedEvent
) -> None:
    # The token is a credential, so it only travels to the mailbox.
    await context.send_direct(
        build_request(
            event.user.id,
            "password_reset",
            "Password Reset Requested",
            "You have requested a password reset. "
            f"Use this token to reset your password: {event.reset_token}",
            channels=[CHANNEL_EMAIL],
        )
    )


async def handle_login_attempt_failed(
    context: EventHandlerContext, event: LoginEvent
) -> None:
    ip_address = event.ip_address or "unknown"
    device = event.device or "unknown"
    await context.notify(
        build_request(
            event.user.id,
            "password_reset",
            "Failed Login Attempt",
            f"A failed login attempt was detected from IP: {ip_address} on device: "
            f"{device}. If this was not you, please reset your password.",
            priority=PRIORITY_HIGH,
            channels=list(ALL_CHANNELS),
            data={"ipAddress": event.ip_address, "device": event.device},
        )
    )


async def handle_user_logged_in(context: EventHandlerContext, event: LoginEvent) -> None:
    logger.info(
        "User %s logged in from %s (%s)", event.user.id, event.ip_address, event.device
    )


HANDLERS: dict[str, TopicHandler] = {
    USER_REGISTERED: TopicHandler(UserEvent, handle_user_registered),
    EMAIL_VERIFIED: TopicHandler(UserEvent, handle_email_verified),
    PASSWORD_RESET: TopicHandler(UserEvent, handle_password_reset),
    PASSWORD_RESET_REQUESTED: TopicHandler(
        PasswordResetRequestedEvent, handle_password_reset_requested
    ),
    LOGIN_ATTEMPT_FAILED: TopicHandler(LoginEvent, handle_login_attempt_failed),
    USER_LOGGED_IN: TopicHandler(LoginEvent, handle_user_logged_in),
}


__all__ = [
    "HANDLERS",
    "handle_email_verified",
    "handle_login_attempt_failed",
    "handle_password_reset",
    "handle_password_reset_requested",
    "handle_user_logged_in",
    "handle_user_registered",
]
