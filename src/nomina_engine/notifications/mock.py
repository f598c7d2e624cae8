"""In-memory email sender for development and tests."""

from __future__ import annotations

import logging
from uuid import uuid4

from nomina_engine.notifications.base import EmailDispatchError, EmailMessage, SendResult

logger = logging.getLogger(__name__)


class MockEmailSender:
    """Records messages instead of sending them.

    Recipients listed in ``fail_for`` are rejected with EmailDispatchError,
    which lets callers exercise their partial-failure handling.
    """

    def __init__(self, fail_for: set[str] | None = None):
        self.fail_for = set(fail_for or ())
        self.sent: list[EmailMessage] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    async def send(self, message: EmailMessage) -> SendResult:
        if message.to in self.fail_for:
            raise EmailDispatchError(message.to, "rejected by mock sender")

        self.sent.append(message)
        logger.info("[MOCK EMAIL] To: %s | Subject: %s", message.to, message.subject)
        return SendResult(message_id=f"mock_{uuid4().hex[:12]}", provider=self.provider_name)

    def recipients(self) -> list[str]:
        return [m.to for m in self.sent]
