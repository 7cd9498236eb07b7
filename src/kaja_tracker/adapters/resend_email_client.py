"""Resend email API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class EmailClient(Protocol):
    """Interface for transactional email delivery."""

    async def send_email(
        self, sender: str, to: list[str], subject: str, html: str
    ) -> dict[str, object]:
        """Send an HTML email and return the provider response."""


@dataclass
class HttpxResendClient(EmailClient):
    """Resend client implemented with httpx."""

    api_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str) -> "HttpxResendClient":
        """Create a Resend client with a managed httpx session."""
        return cls(api_key=api_key, http_client=httpx.AsyncClient())

    async def send_email(
        self, sender: str, to: list[str], subject: str, html: str
    ) -> dict[str, object]:
        """Send an email through Resend's emails endpoint."""
        response = await self.http_client.post(
            RESEND_EMAILS_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"from": sender, "to": to, "subject": subject, "html": html},
            timeout=10,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
