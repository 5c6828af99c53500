"""
Shared test fixtures

In-memory SQLite (aiosqlite) with foreign keys on, so ON DELETE CASCADE and
SET NULL behave as they do on PostgreSQL.
"""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghij"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_JSON"] = "true"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, enable_sqlite_foreign_keys, get_db
from app.models import Account


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def create_account(session_factory):
    """Insert an account directly and return its id"""

    async def _create(brand: str = "VW", role: str = "PBU") -> int:
        async with session_factory() as session:
            account = Account(brand=brand, role=role, password_hash="not-a-bcrypt-hash")
            session.add(account)
            await session.commit()
            return account.account_id

    return _create


@pytest_asyncio.fixture
async def account_id(create_account):
    return await create_account()


# =============================================================================
# HTTP
# =============================================================================

@pytest_asyncio.fixture
async def client(session_factory):
    from app.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
