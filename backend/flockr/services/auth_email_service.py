"""
Auth Email Service

Builds and sends the email verification message.
"""
import html
import logging
from typing import Optional

from flockr.core.config import Settings
from flockr.services.email_provider import EmailProvider, SendResult

logger = logging.getLogger(__name__)


class AuthEmailService:
    """Sends authentication-related emails through an EmailProvider."""

    def __init__(self, provider: EmailProvider, settings: Settings):
        self.provider = provider
        self.api_url = settings.API_URL.rstrip("/")
        self.app_name = settings.APP_NAME
        self.expire_hours = settings.EMAIL_VERIFICATION_TOKEN_HOURS

    def verification_url(self, token: str) -> str:
        return f"{self.api_url}/auth/verify-email/{token}"

    async def send_email_verification(
        self,
        to_email: str,
        verification_token: str,
        user_name: Optional[str] = None,
    ) -> SendResult:
        """
        Send email verification link.

        Args:
            to_email: Recipient email address
            verification_token: Raw (unhashed) verification token
            user_name: Optional user's name for personalization

        Returns:
            SendResult with success status
        """
        result = await self.provider.send(
            to_email=to_email,
            subject=f"Verify Your Email - {self.app_name}",
            html_content=self._get_email_verification_html(
                user_name=user_name or "there",
                verify_url=self.verification_url(verification_token),
            ),
        )

        if result.success:
            logger.info(f"Email verification sent to {to_email}")
        else:
            logger.error(f"Failed to send email verification to {to_email}: {result.error}")

        return result

    def _get_email_verification_html(self, user_name: str, verify_url: str) -> str:
        name = html.escape(user_name)
        return f"""
<html>
  <body style="font-family: Arial, sans-serif; color: #222;">
    <h2>Welcome to {html.escape(self.app_name)}, {name}!</h2>
    <p>Please confirm your email address to activate your account.</p>
    <p><a href="{verify_url}" style="padding: 10px 16px; background: #111; color: #fff; text-decoration: none;">Verify email</a></p>
    <p>Or paste this link into your browser:<br>{verify_url}</p>
    <p>This link expires in {self.expire_hours} hours. If you did not create an account, ignore this email.</p>
  </body>
</html>
""".strip()
