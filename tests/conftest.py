"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os

# Settings are validated at import time; provide a complete environment first.
os.environ.setdefault("POSTGRES_USER", "user")
os.environ.setdefault("POSTGRES_PASSWORD", "pass")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "sponsor")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("REDIS_DB", "0")
os.environ.setdefault("JWT_SECRET_KEY", "StrongSecretKeyWith123!@#AndMoreChars")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI, Request  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sponsor_api.api.dependencies import UnitOfWork, get_uow  # noqa: E402
from sponsor_api.core.config import settings  # noqa: E402
from sponsor_api.core.rate_limit import limiter  # noqa: E402
from sponsor_api.db.base import Base  # noqa: E402
from sponsor_api.db.models import Newsletter, User  # noqa: E402
from sponsor_api.main import create_app  # noqa: E402
from sponsor_api.services.newsletter_service import NewsletterService  # noqa: E402

NOW = datetime(2026, 1, 5, 12, 0, 0, tzinfo=UTC)


class FixedClock:
    """Clock frozen at a chosen instant; tests move it explicitly."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Iterator[None]:
    """Rate-limit counters are process-wide; start every test from zero."""
    limiter.reset()
    yield


@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Engine on TEST_DATABASE_URL, or on a throwaway SQLite file."""
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    test_session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session for arranging data and calling services directly."""
    async with test_session_maker() as session:
        yield session


@pytest.fixture
def newsletter_service(db_session: AsyncSession, clock: FixedClock) -> NewsletterService:
    return NewsletterService(db_session, clock)


def _uow_override(
    session_maker: async_sessionmaker[AsyncSession],
) -> Callable[[Request], AsyncIterator[UnitOfWork]]:
    """Return a get_uow override bound to the test database."""

    async def override(request: Request) -> AsyncIterator[UnitOfWork]:
        async with session_maker() as session:
            try:
                yield UnitOfWork(session, request.app.state.services)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override


@pytest_asyncio.fixture
async def async_app(
    test_session_maker: async_sessionmaker[AsyncSession], clock: FixedClock
) -> AsyncIterator[FastAPI]:
    """App wired to the test database and the fixed clock."""
    fastapi_app = create_app(clock)
    fastapi_app.dependency_overrides[get_uow] = _uow_override(test_session_maker)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_http_client(async_app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Creates an async http client."""
    transport = ASGITransport(app=async_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


UserFactory = Callable[..., Awaitable[User]]
NewsletterFactory = Callable[..., Awaitable[Newsletter]]
TokenIssuer = Callable[[dict[str, Any]], str]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """Create and commit a user."""
    counter = 0

    async def factory(
        slug: str | None = None, *, onboarded: bool = True, **kwargs: Any
    ) -> User:
        nonlocal counter
        counter += 1
        if onboarded and slug is None:
            slug = f"user-{counter}"
        user = User(
            email=kwargs.pop("email", f"user{counter}@example.com"),
            slug=slug,
            is_creator=kwargs.pop("is_creator", True),
            is_sponsor=kwargs.pop("is_sponsor", True),
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return factory


@pytest.fixture
def make_newsletter(
    newsletter_service: NewsletterService, db_session: AsyncSession
) -> NewsletterFactory:
    """Create and commit a newsletter, with its scheduled issues, through the service."""

    async def factory(user: User, **overrides: Any) -> Newsletter:
        attrs: dict[str, Any] = {
            "user_id": user.id,
            "name": "Weekly Digest",
            "slug": "weekly-digest",
            "interval_days": 7,
            "sponsor_in_days": 30,
            "sponsor_before_days": 2,
            "next_issue_at": NOW + timedelta(days=10),
        }
        attrs.update(overrides)
        result = await newsletter_service.create_newsletter(attrs)
        assert isinstance(result, Newsletter), result
        await db_session.commit()
        return result

    return factory


def _issue_token(claims: dict[str, Any]) -> str:
    """Sign claims the way the account service does, valid for an hour."""
    expire = datetime.now(UTC) + timedelta(hours=1)
    return jwt.encode(
        {**claims, "exp": expire}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


@pytest.fixture
def issue_token() -> TokenIssuer:
    return _issue_token


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer headers for a user, as the account service would issue them."""

    def build(user: User) -> dict[str, str]:
        token = _issue_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return build
