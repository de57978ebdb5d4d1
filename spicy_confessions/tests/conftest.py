import os

# Set testing mode before the application settings are built
os.environ.setdefault("TESTING", "true")

import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from httpx import AsyncClient, ASGITransport

from spicy_confessions.main import app
from spicy_confessions.db.session import build_engine, build_session_factory, get_db
from spicy_confessions.models import Base

# Test database URL - in-memory SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test"""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()

@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)

@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async with session_factory() as session:
        yield session

@pytest.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with get_db pointed at the test database"""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()

class MemoryStore:
    """Dict-backed stand-in for the client's key-value storage"""

    def __init__(self, initial=None):
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

class BrokenStore:
    """Storage that is present but refuses every operation"""

    def get(self, key):
        raise OSError("storage disabled")

    def set(self, key, value):
        raise OSError("storage disabled")

@pytest.fixture
def memory_store():
    return MemoryStore()

@pytest.fixture
def broken_store():
    return BrokenStore()
