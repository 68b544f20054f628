"""Email delivery of notifications through SendGrid."""

from __future__ import annotations

import asyncio
import html
import json
import logging
from typing import Any, Awaitable, Callable

from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.application.use_cases.notifications.ports import ContactDirectory
from app.domain.entities import CHANNEL_EMAIL, DeliveryResult, Notification, UserContact
from app.domain.exceptions import DeliveryError

from .retry import RetryPolicy, call_with_retries

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _status_code_of(exc: BaseException) -> int | None:
    status_code = getattr(exc, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def _describe_sendgrid_exception(exc: BaseException) -> str:
    """Log a SendGrid failure and return the text stored in the delivery result."""

    if isinstance(exc, DeliveryError):
        logger.error("%s", exc)
        return str(exc)

    status_code = _status_code_of(exc)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error(
            "SendGrid API request failed with status %s: %s", status_code, details
        )
        return f"SendGrid status {status_code}: {details}"
    if status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
        return f"SendGrid status {status_code}"
    if details:
        logger.error("SendGrid API request failed: %s", details)
        return details
    logger.error("Error sending email via SendGrid: %s", exc)
    return str(exc) or exc.__class__.__name__


def render_notification_email(notification: Notification, contact: UserContact) -> str:
    """Return the HTML body used for ``notification``."""

    greeting = f"Hello {html.escape(contact.name)}," if contact.name else "Hello,"
    return "".join(
        (
            f"<p>{greeting}</p>",
            f"<p><strong>{html.escape(notification.title)}</strong></p>",
            f"<p>{html.escape(notification.message)}</p>",
            "<p>You can review the details in your Revolucare dashboard.</p>",
        )
    )


class SendGridEmailAdapter:
    """Deliver notifications by email, retrying transient SendGrid failures."""

    channel = CHANNEL_EMAIL

    def __init__(
        self,
        contacts: ContactDirectory,
        *,
        api_key: str | None,
        sender: str | None,
        policy: RetryPolicy | None = None,
        client_factory: Callable[[str], Any] = SendGridAPIClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._contacts = contacts
        self._api_key = api_key
        self._sender = sender
        self._policy = policy or RetryPolicy()
        self._client_factory = client_factory
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._sender)

    async def deliver(self, notification: Notification) -> DeliveryResult:
        if not self.configured:
            logger.info("SendGrid configuration incomplete; skipping email delivery")
            return DeliveryResult.failed(self.channel, "Email delivery is not configured")

        contact = await self._contacts.get_contact(notification.user_id)
        if contact is None or not contact.email:
            return DeliveryResult.failed(
                self.channel, f"No email address for user {notification.user_id}"
            )

        message = Mail(
            from_email=self._sender,
            to_emails=contact.email,
            subject=notification.title,
            html_content=render_notification_email(notification, contact),
        )

        try:
            response = await call_with_retries(
                lambda: to_thread.run_sync(self._send, message),
                self._policy,
                status_of=_status_code_of,
                sleep=self._sleep,
            )
        except Exception as exc:
            return DeliveryResult.failed(self.channel, _describe_sendgrid_exception(exc))

        headers = getattr(response, "headers", None) or {}
        return DeliveryResult.ok(
            self.channel,
            status_code=getattr(response, "status_code", None),
            message_id=headers.get("X-Message-Id"),
        )

    def _send(self, message: Mail) -> Any:
        client = self._client_factory(self._api_key)
        response = client.send(message)
        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            details = _extract_sendgrid_error_details(getattr(response, "body", None))
            raise DeliveryError(
                f"SendGrid API responded with status {status_code}"
                + (f": {details}" if details else ""),
                status_code=status_code if isinstance(status_code, int) else None,
            )
        return response


__all__ = ["SendGridEmailAdapter", "render_notification_email"]
