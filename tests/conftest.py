"""
Shared test fixtures for the HRIS test suite.

Async throughout (aiosqlite + AsyncSession). Every test gets a fresh
in-memory database, an admin principal and a pinned clock.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TIMEZONE_OFFSET"] = "+07:00"
os.environ["ENVIRONMENT"] = "development"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_current_active_user, get_db, require_admin
from app.core.clock import Clock, get_clock
from app.db.base import Base
from app.main import app
from app.models.user import User

WIB = timezone(timedelta(hours=7))


class FixedClock(Clock):
    """Clock whose "now" is set by the test."""

    def __init__(self, now: datetime) -> None:
        super().__init__(WIB)
        self.current = now

    def now(self) -> datetime:
        return self.current.astimezone(self.tz)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test, wired into the app."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Raw database session for direct setup / assertions in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    """Pinned at 2024-01-10 08:15 WIB; move it with ``clock.current = ...``."""
    fixed = FixedClock(datetime(2024, 1, 10, 8, 15, tzinfo=WIB))
    app.dependency_overrides[get_clock] = lambda: fixed
    yield fixed
    app.dependency_overrides.pop(get_clock, None)


# ── Auth Overrides ──────────────────────────────────────────────────
async def _override_current_admin():
    return User(id=1, name="Admin", email="admin@example.com", role="admin", status="active")


@pytest.fixture
async def async_client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient wired to the app, authenticated as an admin."""
    app.dependency_overrides[get_current_active_user] = _override_current_admin
    app.dependency_overrides[require_admin] = _override_current_admin

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_current_active_user, None)
    app.dependency_overrides.pop(require_admin, None)


@pytest.fixture
async def anon_client(session_factory, clock) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient with the real auth dependencies."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Data helpers ────────────────────────────────────────────────────
async def create_position(client: AsyncClient, title: str = "Mandor", hourly_rate: float = 20000) -> dict:
    resp = await client.post("/api/positions", json={"title": title, "hourly_rate": hourly_rate})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_employee(
    client: AsyncClient,
    email: str = "budi@example.com",
    name: str = "Budi",
    position_id: int | None = None,
    role: str = "employee",
) -> dict:
    resp = await client.post(
        "/api/users",
        json={
            "name": name,
            "email": email,
            "password": "secret123",
            "role": role,
            "position_id": position_id,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
