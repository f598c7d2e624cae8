"""Pay slip email delivery."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nomina_engine.notifications.base import (
    EmailDispatchError,
    EmailMessage,
    EmailSender,
    SendResult,
)
from nomina_engine.notifications.mock import MockEmailSender
from nomina_engine.notifications.resend import ResendEmailSender

if TYPE_CHECKING:
    from nomina_engine.config import Settings


def get_email_sender(settings: Settings) -> EmailSender:
    """Build the sender selected by ``EMAIL_PROVIDER``."""
    if settings.email_provider == "resend":
        if not settings.resend_api_key:
            raise ValueError("EMAIL_PROVIDER=resend requires RESEND_API_KEY")
        return ResendEmailSender(
            api_key=settings.resend_api_key,
            from_email=settings.email_from,
            from_name=settings.employer_name,
        )
    if settings.email_provider == "mock":
        return MockEmailSender()
    raise ValueError(f"Unknown email provider: {settings.email_provider}")


__all__ = [
    "EmailDispatchError",
    "EmailMessage",
    "EmailSender",
    "SendResult",
    "MockEmailSender",
    "ResendEmailSender",
    "get_email_sender",
]
