"""Pytest configuration and fixtures for Dealer Portal tests.

API tests run against the ASGI app in-process. The database and the
identity lookup are swapped out through `app.dependency_overrides`, and
Redis-backed revocation is patched, so no external services are required.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.auth.deps import get_principal
from app.auth.jwt import create_access_token
from app.auth.principal import Principal
from app.auth.revocation import TokenRevocation
from app.database import get_db
from app.main import app


# ── In-memory session ────────────────────────────────────────

class FakeResult:
    def __init__(self, rows: list):
        self.rows = rows

    def scalar_one(self):
        return self.rows[0] if self.rows else 0

    def scalar_one_or_none(self):
        return self.rows[0] if self.rows else None

    def scalars(self):
        return self

    def all(self):
        return list(self.rows)


class FakeSession:
    """Just enough of AsyncSession for the handlers under test.

    `execute` records every statement and answers with the next queued
    result (see `queue`), or an empty one.
    """

    def __init__(self, *objects):
        self.objects = {(type(o), o.id): o for o in objects}
        self.added: list = []
        self.flushed = False
        self.statements: list = []
        self.results: list[list] = []

    def queue(self, *results: list) -> None:
        self.results.extend(results)

    async def execute(self, statement):
        self.statements.append(statement)
        return FakeResult(self.results.pop(0) if self.results else [])

    async def get(self, model, ident):
        return self.objects.get((model, ident))

    def add(self, obj):
        self.added.append(obj)
        if getattr(obj, "id", None):
            self.objects[(type(obj), obj.id)] = obj

    async def flush(self):
        self.flushed = True

    async def refresh(self, obj):
        return None


@pytest.fixture
def fake_db() -> FakeSession:
    return FakeSession()


# ── App / client ─────────────────────────────────────────────

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Pretend nothing is revoked and every revocation succeeds."""
    revoked_users: list[str] = []

    async def _false(*args, **kwargs):
        return False

    async def _revoke_user(user_id, duration=None):
        revoked_users.append(user_id)
        return True

    monkeypatch.setattr(TokenRevocation, "is_revoked", staticmethod(_false))
    monkeypatch.setattr(TokenRevocation, "is_user_revoked", staticmethod(_false))
    monkeypatch.setattr(TokenRevocation, "revoke_all_user_tokens", staticmethod(_revoke_user))
    return revoked_users


@pytest_asyncio.fixture
async def client(fake_db) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database dependency pointed at `fake_db`."""

    async def override_get_db():
        yield fake_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def as_principal():
    """Authenticate API requests as the given principal (no JWT/DB lookup)."""

    def _set(role: str, dealer_id: str | None = None, user_id: str = "user-1") -> Principal:
        principal = Principal(role=role, dealer_id=dealer_id, user_id=user_id)
        app.dependency_overrides[get_principal] = lambda: principal
        return principal

    return _set


@pytest.fixture
def session_cookie():
    """Build a page-session cookie holding a real access token."""

    def _make(role: str, dealer_id: str | None = None, user_id: str = "user-1") -> dict:
        token = create_access_token(user_id=user_id, role=role, dealer_id=dealer_id)
        return {"access_token": token}

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP-level tests against the ASGI app")
    config.addinivalue_line("markers", "guards: Access guard state-machine tests")
