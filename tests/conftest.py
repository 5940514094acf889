"""Shared fixtures for Daybook tests.

Uses SQLite (aiosqlite) in memory, so no PostgreSQL is required.
Set TEST_DATABASE_URL to override (e.g. for CI with real PostgreSQL).
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Ensure settings can be loaded without .env
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from daybook.database import Base  # noqa: E402

_engine_kwargs = {}
if TEST_DATABASE_URL.startswith("sqlite"):
    _engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }


# ---------------------------------------------------------------------------
# Reset rate-limiter counters before every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Clear in-memory rate-limit counters so tests never block each other."""
    from daybook.core.rate_limit import limiter

    limiter.reset()


# ---------------------------------------------------------------------------
# Per-test database with rollback
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def db_session():
    import daybook.models  # noqa: F401  populate Base.metadata

    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


# ---------------------------------------------------------------------------
# HTTP test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def client(db_session: AsyncSession):
    from daybook.database import get_db
    from daybook.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience: identity-provider token for a fresh user
# ---------------------------------------------------------------------------

def make_token(uid: str, email: str | None = None, secret: str | None = None) -> str:
    from daybook.config import settings

    claims = {"sub": uid}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, secret or settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture()
def signed_in_user():
    """A user as asserted by the identity provider.

    Keys: uid, email, headers
    """
    uid = f"user-{uuid.uuid4().hex[:12]}"
    email = f"{uid}@example.com"
    return {
        "uid": uid,
        "email": email,
        "headers": {"Authorization": f"Bearer {make_token(uid, email)}"},
    }
