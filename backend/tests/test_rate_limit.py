"""
Tests for client IP extraction and the auth endpoint rate limit.
"""
import pytest
from starlette.requests import Request

from flockr.core.config import settings
from flockr.core.rate_limit import get_client_ip, limiter


def _request(headers=None, client=("10.0.0.5", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/auth/login",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_direct_client_ip():
    assert get_client_ip(_request()) == "10.0.0.5"


def test_forwarded_for_uses_first_hop():
    request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert get_client_ip(request) == "203.0.113.7"


def test_blank_forwarded_for_falls_back_to_peer():
    request = _request({"X-Forwarded-For": " "})
    assert get_client_ip(request) == "10.0.0.5"


@pytest.fixture
def enabled_limiter(monkeypatch):
    """Turn the shared limiter on with empty counters for one test."""
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()


class TestAuthRateLimit:

    async def test_login_limited_after_auth_quota(self, client, enabled_limiter):
        quota = int(settings.RATE_LIMIT_AUTH.split("/")[0])
        credentials = {"email": "ghost@example.com", "password": "wrong-password"}

        codes = [(await client.post("/auth/login", json=credentials)).status_code for _ in range(quota)]
        blocked = await client.post("/auth/login", json=credentials)

        assert codes == [401] * quota
        assert blocked.status_code == 429
        assert blocked.json()["message"].startswith("Too many attempts")
        assert int(blocked.headers["Retry-After"]) > 0

    async def test_limit_is_per_client(self, client, enabled_limiter):
        quota = int(settings.RATE_LIMIT_AUTH.split("/")[0])
        credentials = {"email": "ghost@example.com", "password": "wrong-password"}

        for _ in range(quota + 1):
            await client.post("/auth/login", json=credentials, headers={"X-Forwarded-For": "203.0.113.7"})
        resp = await client.post("/auth/login", json=credentials, headers={"X-Forwarded-For": "198.51.100.9"})

        assert resp.status_code == 401

    async def test_disabled_limiter_never_blocks(self, client):
        credentials = {"email": "ghost@example.com", "password": "wrong-password"}

        codes = {(await client.post("/auth/login", json=credentials)).status_code for _ in range(8)}

        assert codes == {401}
