"""Database engine and session factory creation."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from repocache.config import Config


def is_memory_url(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or is_memory_url(url):
        return url

    # Extract path from URL (sqlite+aiosqlite:///path or sqlite:///path)
    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def create_db_engine(config: Config) -> AsyncEngine:
    """Create async database engine.

    Handles SQLite and PostgreSQL with appropriate settings.
    """
    url = _expand_sqlite_path(config.database.url)

    if url.startswith("sqlite"):
        engine_kwargs: dict[str, Any] = {
            "echo": config.database.echo,
            "connect_args": {"check_same_thread": False},
        }
        if is_memory_url(url):
            # An in-memory database lives only as long as its one connection
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs = {
            "echo": config.database.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for dependency injection."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )
