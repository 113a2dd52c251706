from typing import Protocol

import httpx
from pydantic import ValidationError

from checkout_api.config import settings
from checkout_api.errors import NotificationError
from checkout_api.observability import observe_timing
from checkout_api.schemas.gateway import EmailReceipt


class EmailSenderProtocol(Protocol):
    def send(self, *, sender: str, to: str, subject: str, html: str) -> str: ...


class ResendEmailClient:
    """Deliver transactional email through the Resend HTTP API."""

    def __init__(self, base_url: str, api_key: str, timeout_s: float) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = timeout_s

    def send(self, *, sender: str, to: str, subject: str, html: str) -> str:
        if not self.api_key:
            raise NotificationError("RESEND_API_KEY is not configured")

        try:
            with observe_timing("email_send_seconds"):
                with httpx.Client(timeout=self.timeout_s) as client:
                    response = client.post(
                        f"{self.base_url}/emails",
                        json={"from": sender, "to": [to], "subject": subject, "html": html},
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
        except httpx.TimeoutException as err:
            raise NotificationError("Email provider timeout") from err
        except httpx.TransportError as err:
            raise NotificationError(str(err) or "Email provider unavailable") from err

        if response.status_code >= 400:
            raise NotificationError(f"Email provider returned {response.status_code}")

        try:
            return EmailReceipt.model_validate(response.json()).id
        except (ValueError, ValidationError) as err:
            raise NotificationError("Unexpected email provider response") from err


def get_email_client() -> EmailSenderProtocol:
    return ResendEmailClient(
        base_url=settings.email_api_base_url,
        api_key=settings.email_api_key,
        timeout_s=settings.email_timeout_s,
    )
