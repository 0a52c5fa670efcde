"""Fixtures for SQLite-backed integration tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from repocache.config import Config, DatabaseConfig
from repocache.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from repocache.infrastructure.persistence.tables import metadata


@pytest_asyncio.fixture
async def sqlite_engine():
    """Per-test in-memory engine with the schema created."""
    config = Config(database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    engine = create_db_engine(config)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(sqlite_engine)
