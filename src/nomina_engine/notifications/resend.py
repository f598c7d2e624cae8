"""Resend REST API sender."""

from __future__ import annotations

import logging

import httpx

from nomina_engine.notifications.base import EmailDispatchError, EmailMessage, SendResult

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailSender:
    """Sends email through https://resend.com."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return "resend"

    @property
    def sender(self) -> str:
        if self.from_name:
            return f"{self.from_name} <{self.from_email}>"
        return self.from_email

    def _payload(self, message: EmailMessage) -> dict:
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.body_html,
        }
        if message.body_text:
            payload["text"] = message.body_text
        return payload

    async def send(self, message: EmailMessage) -> SendResult:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            if self._client is not None:
                response = await self._client.post(
                    RESEND_API_URL, json=self._payload(message), headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        RESEND_API_URL, json=self._payload(message), headers=headers
                    )
        except httpx.HTTPError as exc:
            logger.error("Resend request failed for %s: %s", message.to, exc)
            raise EmailDispatchError(message.to, str(exc)) from exc

        if response.status_code not in (200, 201, 202):
            logger.error("Resend API error: %s - %s", response.status_code, response.text)
            raise EmailDispatchError(
                message.to, f"provider returned {response.status_code}"
            )

        try:
            message_id = response.json().get("id", "")
        except (ValueError, AttributeError) as exc:
            logger.error("Unreadable Resend response for %s: %r", message.to, response.text)
            raise EmailDispatchError(message.to, "provider returned an unreadable response") from exc

        logger.info("Email sent via Resend to %s (%s)", message.to, message_id)
        return SendResult(message_id=message_id, provider=self.provider_name)
