"""Shared test fixtures.

Tests run against a throwaway SQLite file (aiosqlite) and an in-memory fake
Redis, so no external services are needed.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ.setdefault("WOP_ENVIRONMENT", "test")
os.environ.setdefault("WOP_JWT_SECRET", "test-secret-for-session-tokens-0123456789")
os.environ.setdefault("WOP_ADMIN_EMAIL_DOMAIN", "whosonpole.org")

from wop.auth.jwt import create_access_token  # noqa: E402
from wop.config import Settings, get_settings  # noqa: E402
from wop.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from wop.db.base import Base  # noqa: E402
from wop.db.models import Comment, Grid, LiveChatMessage, Post, Profile, Report  # noqa: E402
from wop.main import create_app  # noqa: E402
from wop.redis_client import set_redis  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest_asyncio.fixture(autouse=True)
async def fake_redis() -> AsyncGenerator[FakeRedis, None]:
    """Install an in-memory Redis for rate limit counters."""
    client = FakeRedis(decode_responses=True)
    set_redis(client)
    try:
        yield client
    finally:
        set_redis(None)
        await client.flushall()
        await client.aclose()


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncGenerator[None, None]:
    """Fresh SQLite database with the full schema."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'wop.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for setup and assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def app(database: None) -> FastAPI:
    return create_app()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_profile(db: AsyncSession) -> Callable[..., Awaitable[Profile]]:
    async def _make(
        username: str | None = None,
        *,
        email: str | None = None,
        role: str = "user",
        points: int = 0,
        strikes: int = 0,
        banned_until: datetime | None = None,
    ) -> Profile:
        profile = Profile(
            id=uuid.uuid4(),
            username=username or f"fan_{uuid.uuid4().hex[:8]}",
            email=email,
            role=role,
            points=points,
            strikes=strikes,
            banned_until=banned_until,
        )
        db.add(profile)
        await db.commit()
        return profile

    return _make


@pytest.fixture
def make_content(db: AsyncSession) -> Callable[..., Awaitable[Post | Comment | Grid]]:
    models = {"post": Post, "comment": Comment, "grid": Grid}

    async def _make(target_type: str, owner: Profile) -> Post | Comment | Grid:
        item = models[target_type](id=uuid.uuid4(), user_id=owner.id)
        db.add(item)
        await db.commit()
        return item

    return _make


@pytest.fixture
def make_chat_message(db: AsyncSession) -> Callable[..., Awaitable[LiveChatMessage]]:
    async def _make(owner: Profile, message: str = "Box box!") -> LiveChatMessage:
        item = LiveChatMessage(user_id=owner.id, message=message)
        db.add(item)
        await db.commit()
        return item

    return _make


@pytest.fixture
def make_report(db: AsyncSession) -> Callable[..., Awaitable[Report]]:
    async def _make(
        reporter: Profile,
        target_type: str,
        target_id: object,
        *,
        reason: str = "Spam",
        status: str = "pending",
        created_at: datetime | None = None,
    ) -> Report:
        report = Report(
            reporter_id=reporter.id,
            target_type=target_type,
            target_id=str(target_id),
            reason=reason,
            status=status,
        )
        if created_at is not None:
            report.created_at = created_at
        db.add(report)
        await db.commit()
        return report

    return _make


def _auth_headers(profile: Profile, email: str | None = None) -> dict[str, str]:
    token = create_access_token(profile.id, email if email is not None else profile.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build a bearer header carrying a session token for a profile."""
    return _auth_headers


@pytest_asyncio.fixture
async def admin(make_profile: Callable[..., Awaitable[Profile]]) -> Profile:
    return await make_profile("race_control", email="steward@whosonpole.org", role="admin", points=100)


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin: Profile) -> AsyncClient:
    """Client authenticated as an admin."""
    client.headers.update(_auth_headers(admin))
    return client
