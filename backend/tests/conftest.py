"""
Microposts Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_engine:      in-memory SQLite engine with every table created
    ├── session_factory:  async_sessionmaker bound to test_engine
    ├── db_session:       one open session for service/repository tests
    ├── test_settings:    Settings with a known secret and non-Secure cookies
    ├── test_app:         create_app() wired to the fixtures above
    ├── test_client:      HTTPX AsyncClient for API endpoint testing
    ├── make_user:        factory that inserts a user and returns it
    ├── auth_cookie:      factory for a valid "authToken" Cookie header
    └── mock_db_session:  AsyncMock session for pure-unit tests
"""

import os

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import AsyncGenerator, Dict, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from microposts.config import Settings  # noqa: E402
from microposts.database import create_tables  # noqa: E402
from microposts.models.user import User  # noqa: E402
from microposts.security.passwords import hash_password  # noqa: E402
from microposts.security.tokens import create_access_token  # noqa: E402

TEST_SECRET = "test-secret-not-real"
TEST_PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps a single connection, so every session in the test
    (route sessions and the middleware's lookups alike) sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_missing_post(mock_db_session):
            mock_db_session.get.return_value = None
            assert not await has_access(mock_db_session, user_id="u", post_id="p")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Data Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(session_factory):
    """
    Inserts a committed user and returns the ORM row.

    Usage:
        alice = await make_user("alice@example.com", name="Alice")
    """

    async def _make_user(
        email: str,
        password: str = TEST_PASSWORD,
        name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        async with session_factory() as session:
            user = User(
                email=email,
                password_hash=hash_password(password),
                name=name,
                last_name=last_name,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest.fixture
def auth_cookie():
    """
    Builds a Cookie header carrying a valid session token for `user_id`.

    The header is sent explicitly per request instead of through the
    client's cookie jar, which ignores cookies on plain-http test URLs
    when they were issued as Secure.
    """

    def _auth_cookie(user_id: str, secret: str = TEST_SECRET) -> Dict[str, str]:
        token = create_access_token(user_id, secret=secret)
        return {"Cookie": f"authToken={token}"}

    return _auth_cookie


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret_key=TEST_SECRET,
        auth_cookie_secure=False,
        posts_per_page=16,
        log_level="WARNING",
    )


@pytest.fixture
def test_app(test_settings, session_factory):
    from microposts.main import create_app

    return create_app(app_settings=test_settings, session_factory=session_factory)


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
