"""
Shared fixtures: a throwaway SQLite database per test, an HTTP client bound
to it, and small factories for profiles and events.
"""
from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub import notifications
from hackhub.config import settings
from hackhub.core.db_types import utcnow
from hackhub.database import build_engine, build_sessionmaker, get_db
from hackhub.main import app
from hackhub.orm.base import Base
from hackhub.orm.event import Event
from hackhub.orm.profile import Profile
from hackhub.rate_limit import InMemoryRateLimiter, limiter, set_registration_limiter
from hackhub.security import create_access_token


@pytest_asyncio.fixture
async def engine(tmp_path):
    # File-backed so concurrent sessions see one database
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
    await notifications.drain()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()
    await notifications.drain()


@pytest.fixture(autouse=True)
def isolated_runtime(monkeypatch):
    """Fresh limiter budget and default settings for every test."""
    set_registration_limiter(InMemoryRateLimiter(max_requests=5, window_seconds=3600))
    monkeypatch.setattr(limiter, "enabled", False)
    monkeypatch.setattr(settings, "LEADERBOARD_RANKING_SCHEME", "competition")
    monkeypatch.setattr(settings, "NOTIFICATION_WEBHOOK_URL", None)
    yield
    set_registration_limiter(None)


async def make_profile(db: AsyncSession, username: str, is_admin: bool = False, **fields) -> Profile:
    profile = Profile(username=username, email=f"{username}@example.com", is_admin=is_admin, **fields)
    db.add(profile)
    await db.commit()
    return profile


async def make_event(
    db: AsyncSession,
    title: str = "Spring Hack",
    max_participants: int = 2,
    registration_open: bool = True,
    starts_in_days: int = 7,
    duration_days: int = 2,
) -> Event:
    start = utcnow() + timedelta(days=starts_in_days)
    event = Event(
        title=title,
        location="Berlin",
        start_date=start,
        end_date=start + timedelta(days=duration_days),
        max_participants=max_participants,
        registration_open=registration_open,
    )
    db.add(event)
    await db.commit()
    return event


def auth_headers(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


@pytest_asyncio.fixture
async def user(db) -> Profile:
    return await make_profile(db, "alice")


@pytest_asyncio.fixture
async def admin(db) -> Profile:
    return await make_profile(db, "organizer", is_admin=True)


@pytest_asyncio.fixture
async def event(db) -> Event:
    return await make_event(db)
