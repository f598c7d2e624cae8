"""Base protocol and types for pay slip email senders.

All sender adapters must implement the EmailSender protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from nomina_engine.errors import PayrollError


class EmailDispatchError(PayrollError):
    """Raised when a message could not be handed to the provider."""

    code = "EMAIL_DISPATCH_FAILURE"
    status_code = 502

    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Email to {recipient} failed: {reason}")


@dataclass(frozen=True)
class EmailMessage:
    """Email message data structure."""

    to: str
    subject: str
    body_html: str
    body_text: str | None = None


@dataclass(frozen=True)
class SendResult:
    """Result of handing a message to a provider."""

    message_id: str
    provider: str


class EmailSender(Protocol):
    """Protocol for email provider adapters."""

    @property
    def provider_name(self) -> str:
        """Provider identifier (e.g., 'resend', 'mock')."""
        ...

    async def send(self, message: EmailMessage) -> SendResult:
        """Send a message.

        Raises:
            EmailDispatchError: If the provider rejected the message or
                could not be reached
        """
        ...
