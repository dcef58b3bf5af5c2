"""Shared test fixtures.

Every test gets its own SQLite database file; Redis is left unconfigured so
rate limiting and login lockout are skipped.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.jwt import create_access_token
from wastewise.auth.service import register_user
from wastewise.config import get_settings
from wastewise.database import close_db, get_engine, get_session_factory, init_db
from wastewise.db.base import Base
from wastewise.db.models import LedgerEntry, User
from wastewise.main import create_app
from wastewise.points.ledger import append, user_transaction

TEST_PASSWORD = "Recycle2026"


@pytest.fixture(autouse=True)
def _test_settings(tmp_path, monkeypatch):
    """Point the app at a throwaway SQLite database."""
    monkeypatch.setenv("WW_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'wastewise.db'}")
    monkeypatch.setenv("WW_REDIS_URL", "")
    monkeypatch.setenv("WW_LOG_FORMAT", "console")
    monkeypatch.setenv("WW_JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Initialize the engine and create the schema."""
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service calls and assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_user(database) -> Callable[..., Awaitable[User]]:
    """Factory: register a user (optionally staff) and commit."""

    async def _make_user(email: str = "recycler@wastewise.io", *, is_staff: bool = False) -> User:
        async with get_session_factory()() as db:
            user = await register_user(db, email=email, password=TEST_PASSWORD, full_name="Test Recycler")
            user.is_staff = is_staff
            await db.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def grant_points(database) -> Callable[..., Awaitable[LedgerEntry]]:
    """Factory: credit a user's ledger through the normal append path."""

    async def _grant(user_id: int, points: int, kind: str = "bonus") -> LedgerEntry:
        async with get_session_factory()() as db:
            async with user_transaction(db, user_id):
                entry = await append(db, user_id, kind, points, description="Test credit")
            return entry

    return _grant


@pytest_asyncio.fixture
async def user(make_user) -> User:
    return await make_user()


@pytest_asyncio.fixture
async def staff_user(make_user) -> User:
    return await make_user("driver@wastewise.io", is_staff=True)


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer header for a user."""
    return auth_header


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, user: User) -> AsyncClient:
    """Client authenticated as the default test user."""
    client.headers.update(auth_header(user))
    return client
