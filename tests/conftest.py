"""
Pytest configuration and fixtures for GeoSnap tests
"""

import os

# Test-friendly environment, set before anything imports app.config
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("METRICS_ENABLED", "1")
os.environ.setdefault("ENABLE_GEOCODER", "0")

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.errors import DispatchError
from app.db import init_db, close_db

TEST_DB_PATH = "./.test_db.sqlite3"


def _remove_test_db():
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(TEST_DB_PATH + suffix):
            os.remove(TEST_DB_PATH + suffix)


@pytest.fixture(scope="function")
async def db_setup():
    """Initialize a fresh SQLite test database for each test."""
    _remove_test_db()
    await init_db()
    try:
        yield
    finally:
        await close_db()
        _remove_test_db()


class FakeTransport:
    """Collects outgoing mail instead of sending it."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise DispatchError("Resend error: simulated outage")
        self.sent.append({"to": to, "subject": subject, "html": html})

    @property
    def last_code(self) -> str:
        # Subject reads "<code> is your GeoSnap verification code"
        return self.sent[-1]["subject"].split()[0]


@pytest.fixture
def outbox():
    return FakeTransport()


@pytest.fixture
def failing_outbox():
    return FakeTransport(fail=True)


@pytest.fixture
async def client(db_setup, outbox):
    from app.main import app
    from app.routers.auth import get_email_transport

    app.dependency_overrides[get_email_transport] = lambda: outbox
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
