# tests/conftest.py
import re
from contextlib import AsyncExitStack
from datetime import datetime, timedelta, timezone

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from foodshare.core.config import Settings
from foodshare.core.errors import EmailDeliveryError
from foodshare.main import create_app
from foodshare.repos.inmemory import InMemoryRepo
from foodshare.repos.sessions import InMemorySessionStore
from foodshare.services.mailer import Mailer

ADMIN_EMAIL = "admin@foodshare.org"
ADMIN_PASSWORD = "password123"
PASSWORD = "s3cret-pass"


class RecordingMailer(Mailer):
    def __init__(self):
        self.sent = []
        self.failures = 0

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.failures:
            self.failures -= 1
            raise EmailDeliveryError()
        self.sent.append({"to": to, "subject": subject, "html": html})

    def to(self, address: str):
        return [m for m in self.sent if m["to"] == address]

    def token_for(self, address: str, path: str) -> str:
        for m in reversed(self.to(address)):
            found = re.search(rf"/{path}\?token=([\w-]+)", m["html"])
            if found:
                return found.group(1)
        raise AssertionError(f"no {path} link mailed to {address}")


@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        base_url="http://foodshare.test",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        smtp_host="",
    )


@pytest.fixture
def repo():
    return InMemoryRepo()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
async def app(settings, repo, mailer):
    application = create_app(
        settings=settings,
        repo=repo,
        sessions=InMemorySessionStore(timedelta(days=settings.session_ttl_days)),
        mailer=mailer,
    )
    async with LifespanManager(application):
        yield application


@pytest.fixture
async def new_client(app):
    """Factory for independent clients, each with its own cookie jar."""
    async with AsyncExitStack() as stack:
        async def make() -> AsyncClient:
            transport = ASGITransport(app=app, raise_app_exceptions=True)
            return await stack.enter_async_context(AsyncClient(transport=transport, base_url="http://test"))
        yield make


@pytest.fixture
async def client(new_client):
    return await new_client()


# ---------- helpers ----------
def registration(email: str, role: str = "volunteer", **extra) -> dict:
    body = {
        "email": email,
        "password": PASSWORD,
        "confirmPassword": PASSWORD,
        "role": role,
        "firstName": "Test",
        "lastName": role.title(),
        "phone": "555-0100",
    }
    if role == "ngo":
        body["organizationName"] = f"{email.split('@')[0]} pantry"
    body.update(extra)
    return body


async def register_verified(ac: AsyncClient, mailer: RecordingMailer, email: str, role: str = "volunteer", **extra) -> None:
    r = await ac.post("/api/register", json=registration(email, role, **extra))
    assert r.status_code == 201, r.text
    token = mailer.token_for(email, "verify-email")
    r = await ac.get("/api/verify-email", params={"token": token})
    assert r.status_code == 200, r.text


async def login(ac: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    r = await ac.post("/api/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


def pickup_body(ngo_id: int, starts_in: timedelta = timedelta(days=1), **extra) -> dict:
    start = datetime.now(timezone.utc) + starts_in
    body = {
        "ngoId": ngo_id,
        "title": "Bakery surplus",
        "description": "Bread and pastries from closing time",
        "address": "12 Market St",
        "city": "San Francisco",
        "state": "CA",
        "zipCode": "94103",
        "foodItems": "bread, croissants",
        "quantity": "3 crates",
        "pickupTime": start.isoformat(),
        "pickupEndTime": (start + timedelta(hours=2)).isoformat(),
        "destination": "Mission shelter",
    }
    body.update(extra)
    return body
