"""
Email Providers

SendGrid for real delivery, console for local development.
Both report the outcome as a SendResult instead of raising.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from flockr.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailProvider(Protocol):
    async def send(self, to_email: str, subject: str, html_content: str) -> SendResult:
        ...

    async def close(self) -> None:
        ...


class SendGridProvider:
    """SendGrid v3 mail/send over a shared httpx client."""

    BASE_URL = "https://api.sendgrid.com/v3"

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SendGridProvider":
        return cls(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.SENDGRID_FROM_EMAIL,
            from_name=settings.SENDGRID_FROM_NAME,
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=30.0,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Explicit cleanup method."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def send(self, to_email: str, subject: str, html_content: str) -> SendResult:
        if not self.api_key:
            logger.warning("SendGrid API key not configured")
            return SendResult(success=False, error="Email not configured")

        payload = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {"email": self.from_email, "name": self.from_name},
            "subject": subject,
            "content": [{"type": "text/html", "value": html_content}],
        }

        http = await self._get_http_client()
        try:
            resp = await http.post(f"{self.BASE_URL}/mail/send", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"SendGrid request failed: {e}")
            return SendResult(success=False, error=str(e))

        if resp.status_code in (200, 202):
            return SendResult(success=True, message_id=resp.headers.get("X-Message-Id"))

        logger.error(f"SendGrid send failed: {resp.status_code} - {resp.text}")
        return SendResult(success=False, error=f"HTTP {resp.status_code}")


class ConsoleEmailProvider:
    """Logs emails instead of sending them. Development only."""

    async def send(self, to_email: str, subject: str, html_content: str) -> SendResult:
        logger.info(f"[console email] to={to_email} subject={subject!r}\n{html_content}")
        return SendResult(success=True, message_id="console")

    async def close(self) -> None:
        return None


def build_email_provider(settings: Settings) -> EmailProvider:
    if settings.EMAIL_BACKEND == "console":
        return ConsoleEmailProvider()
    return SendGridProvider.from_settings(settings)
