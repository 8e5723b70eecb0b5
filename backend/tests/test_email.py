"""
Tests for email providers and the verification email.
"""
import json

import httpx

from flockr.core.config import Settings
from flockr.services.auth_email_service import AuthEmailService
from flockr.services.email_provider import (
    ConsoleEmailProvider,
    SendGridProvider,
    build_email_provider,
)


def _provider(handler, api_key="SG.test-key") -> SendGridProvider:
    return SendGridProvider(
        api_key=api_key,
        from_email="noreply@flockr.app",
        from_name="Flockr",
        transport=httpx.MockTransport(handler),
    )


class TestSendGridProvider:

    async def test_successful_send(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(202, headers={"X-Message-Id": "msg-123"})

        provider = _provider(handler)
        result = await provider.send("ada@example.com", "Hello", "<p>Hi</p>")
        await provider.close()

        assert result.success is True
        assert result.message_id == "msg-123"
        assert captured["url"] == "https://api.sendgrid.com/v3/mail/send"
        assert captured["auth"] == "Bearer SG.test-key"
        assert captured["body"]["personalizations"] == [{"to": [{"email": "ada@example.com"}]}]
        assert captured["body"]["from"] == {"email": "noreply@flockr.app", "name": "Flockr"}
        assert captured["body"]["content"] == [{"type": "text/html", "value": "<p>Hi</p>"}]

    async def test_error_status_is_failure(self):
        provider = _provider(lambda request: httpx.Response(401, text="bad key"))

        result = await provider.send("ada@example.com", "Hello", "<p>Hi</p>")

        assert result.success is False
        assert result.error == "HTTP 401"

    async def test_transport_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await _provider(handler).send("ada@example.com", "Hello", "<p>Hi</p>")

        assert result.success is False
        assert "connection refused" in result.error

    async def test_missing_api_key_fails_without_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(202)

        result = await _provider(handler, api_key="").send("ada@example.com", "Hello", "<p>Hi</p>")

        assert result.success is False
        assert calls == []


class TestProviderSelection:

    def test_console_backend(self):
        assert isinstance(build_email_provider(Settings(EMAIL_BACKEND="console")), ConsoleEmailProvider)

    def test_sendgrid_backend(self):
        provider = build_email_provider(Settings(EMAIL_BACKEND="sendgrid", SENDGRID_API_KEY="SG.x"))
        assert isinstance(provider, SendGridProvider)
        assert provider.api_key == "SG.x"

    async def test_console_always_succeeds(self):
        result = await ConsoleEmailProvider().send("ada@example.com", "Hello", "<p>Hi</p>")
        assert result.success is True


class TestVerificationEmail:

    async def test_link_and_escaping(self, email_provider):
        service = AuthEmailService(email_provider, Settings(API_URL="https://api.flockr.app/"))

        result = await service.send_email_verification("ada@example.com", "abc123", "<Ada>")

        assert result.success
        message = email_provider.sent[0]
        assert message["subject"] == "Verify Your Email - Flockr"
        assert "https://api.flockr.app/auth/verify-email/abc123" in message["html"]
        assert "&lt;Ada&gt;" in message["html"]
        assert "<Ada>" not in message["html"]
        assert "24 hours" in message["html"]

    async def test_failure_is_reported(self, email_provider):
        email_provider.fail = True
        service = AuthEmailService(email_provider, Settings())

        result = await service.send_email_verification("ada@example.com", "abc123")

        assert result.success is False
