"""
Pytest configuration and fixtures for Flockr tests.

The app runs against an in-memory SQLite database with fake email and media
providers injected through create_app.
"""
import os
import re
from typing import AsyncGenerator, Optional

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-signing-key-for-unit-tests-only"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_AUTO_CREATE"] = "false"

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from flockr.core.config import Settings  # noqa: E402
from flockr.core.database import Database  # noqa: E402
from flockr.core.exceptions import MediaStoreError, UploadError  # noqa: E402
from flockr.main import create_app  # noqa: E402
from flockr.services.email_provider import SendResult  # noqa: E402
from flockr.services.storage import MediaAsset  # noqa: E402

VERIFY_LINK = re.compile(r"/auth/verify-email/([0-9a-f]{64})")

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256


class FakeEmailProvider:
    """Records sent emails; set ``fail`` to simulate an outage."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.closed = False

    async def send(self, to_email: str, subject: str, html_content: str) -> SendResult:
        if self.fail:
            return SendResult(success=False, error="simulated outage")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})
        return SendResult(success=True, message_id=f"fake-{len(self.sent)}")

    async def close(self) -> None:
        self.closed = True

    def token_for(self, email: str) -> Optional[str]:
        """Raw token from the latest verification email sent to ``email``."""
        for message in reversed(self.sent):
            if message["to"] == email:
                match = VERIFY_LINK.search(message["html"])
                return match.group(1) if match else None
        return None


class FakeMediaStore:
    """In-memory media store; ``fail_upload`` / ``fail_delete`` simulate errors."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_upload = False
        self.fail_delete = False
        self._counter = 0

    async def upload(self, content, filename, content_type, resource_type="video") -> MediaAsset:
        if self.fail_upload:
            raise UploadError(details={"error": "simulated outage"})
        self._counter += 1
        handle = f"test/{resource_type}s/{self._counter}_{filename}"
        self.objects[handle] = content
        return MediaAsset(
            url=f"https://media.test/{handle}",
            handle=handle,
            content_type=content_type,
            size_bytes=len(content),
        )

    async def delete(self, handle, resource_type="video") -> None:
        if self.fail_delete:
            raise MediaStoreError("simulated outage")
        self.deleted.append(handle)
        self.objects.pop(handle, None)


@pytest.fixture
def settings() -> Settings:
    return Settings(API_URL="http://testserver")


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database("sqlite+aiosqlite://", engine=engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as db:
        yield db


@pytest.fixture
def email_provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def app(settings, database, email_provider, media_store):
    return create_app(
        settings=settings,
        database=database,
        email_provider=email_provider,
        media_store=media_store,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def make_user(client, email_provider):
    """
    Register (and by default verify and log in) a user through the API.

    Returns a dict with id, email, password, token and auth headers.
    """

    async def _make_user(
        email: str = "seller@example.com",
        role: str = "seller",
        password: str = "secret123",
        first_name: str = "Sam",
        last_name: str = "Seller",
        verify: bool = True,
    ) -> dict:
        resp = await client.post(
            "/auth/register",
            json={
                "email": email,
                "firstName": first_name,
                "lastName": last_name,
                "password": password,
                "role": role,
            },
        )
        assert resp.status_code == 201, resp.text
        user = {"id": resp.json()["user"]["id"], "email": email, "password": password}

        token = None
        if verify:
            resp = await client.get(f"/auth/verify-email/{email_provider.token_for(email)}")
            assert resp.status_code == 200, resp.text
            resp = await client.post("/auth/login", json={"email": email, "password": password})
            assert resp.status_code == 200, resp.text
            token = resp.json()["token"]

        user["token"] = token
        user["headers"] = {"Authorization": f"Bearer {token}"} if token else {}
        return user

    return _make_user


@pytest.fixture
def create_listing(client):
    """Create a product through the API as the given seller."""

    async def _create_listing(seller: dict, title: str = "Vintage camera", price: str = "49.99", **fields) -> dict:
        data = {"title": title, "description": "Works perfectly", "price": price}
        data.update(fields)
        resp = await client.post(
            "/products/create_product",
            data=data,
            files={"video": ("demo.mp4", VIDEO_BYTES, "video/mp4")},
            headers=seller["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create_listing
