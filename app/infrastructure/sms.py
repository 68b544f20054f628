"""SMS delivery of notifications through the Twilio REST API."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from app.application.use_cases.notifications.ports import ContactDirectory
from app.domain.entities import CHANNEL_SMS, DeliveryResult, Notification

from .retry import RetryPolicy, request_with_retries

logger = logging.getLogger(__name__)

TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"
DEFAULT_TIMEOUT_SECONDS = 10.0
SMS_BODY_MAX_LENGTH = 1600


def render_sms_body(notification: Notification) -> str:
    body = f"{notification.title}: {notification.message}"
    if len(body) > SMS_BODY_MAX_LENGTH:
        body = body[: SMS_BODY_MAX_LENGTH - 3] + "..."
    return body


def _extract_twilio_error(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"Twilio responded with status {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        code = payload.get("code")
        if code:
            return f"{payload['message']} (code {code})"
        return str(payload["message"])
    return f"Twilio responded with status {response.status_code}"


class TwilioSmsAdapter:
    """Send notifications as text messages, retrying transient failures."""

    channel = CHANNEL_SMS

    def __init__(
        self,
        contacts: ContactDirectory,
        *,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
        policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = TWILIO_API_BASE_URL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._contacts = contacts
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._policy = policy or RetryPolicy()
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_number)

    async def deliver(self, notification: Notification) -> DeliveryResult:
        if not self.configured:
            logger.info("Twilio configuration incomplete; skipping SMS delivery")
            return DeliveryResult.failed(self.channel, "SMS delivery is not configured")

        contact = await self._contacts.get_contact(notification.user_id)
        if contact is None or not contact.phone:
            return DeliveryResult.failed(
                self.channel, f"No phone number for user {notification.user_id}"
            )

        url = f"{self._base_url}/Accounts/{self._account_sid}/Messages.json"
        form = {
            "To": contact.phone,
            "From": self._from_number,
            "Body": render_sms_body(notification),
        }

        try:
            if self._client is not None:
                response = await self._post(self._client, url, form)
            else:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
                    response = await self._post(client, url, form)
        except httpx.HTTPError as exc:
            logger.error("Twilio request failed for notification %s: %s", notification.id, exc)
            return DeliveryResult.failed(self.channel, f"Twilio request failed: {exc}")

        if response.is_success:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            return DeliveryResult.ok(
                self.channel,
                status_code=response.status_code,
                message_id=payload.get("sid"),
                provider_status=payload.get("status"),
            )

        error = _extract_twilio_error(response)
        logger.error(
            "Twilio API responded with status %s: %s", response.status_code, error
        )
        return DeliveryResult.failed(self.channel, error, status_code=response.status_code)

    async def _post(
        self, client: httpx.AsyncClient, url: str, form: dict[str, str | None]
    ) -> httpx.Response:
        return await request_with_retries(
            lambda: client.post(
                url, data=form, auth=(self._account_sid, self._auth_token)
            ),
            self._policy,
            sleep=self._sleep,
        )


__all__ = ["SMS_BODY_MAX_LENGTH", "TwilioSmsAdapter", "render_sms_body"]
