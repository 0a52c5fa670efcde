import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import Select, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from repocache.domain.repository.model.value import (
    ContentSnapshot,
    Provider,
    RepositoryKey,
    VersionId,
    VersionInfo,
)
from repocache.domain.repository.port.snapshot_store import SnapshotStore
from repocache.domain.shared.error import StorageUnavailableError
from repocache.infrastructure.persistence.tables import repository_snapshots_table as t


def _snapshot_to_row(snapshot: ContentSnapshot) -> dict[str, Any]:
    return {
        "id": str(uuid4()),
        "provider": snapshot.key.provider.value,
        "organization": snapshot.key.organization,
        "repository": snapshot.key.repository,
        "version": snapshot.version,
        "content": snapshot.content,
        "created_at": snapshot.created_at,
    }


def _utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _row_to_snapshot(row: dict[str, Any]) -> ContentSnapshot:
    return ContentSnapshot(
        key=RepositoryKey(
            provider=Provider(row["provider"]),
            organization=row["organization"],
            repository=row["repository"],
        ),
        version=VersionId(row["version"]),
        content=row["content"],
        created_at=_utc(row["created_at"]),
    )


def _where_key(stmt: Select, key: RepositoryKey) -> Select:
    return stmt.where(
        t.c.provider == key.provider.value,
        t.c.organization == key.organization,
        t.c.repository == key.repository,
    )


class SQLAlchemySnapshotStore(SnapshotStore):
    """Snapshot store over a SQLAlchemy async engine.

    Each call runs in its own short session, so one instance can be shared by
    every request and every coalesced operation.

    SQLite allows one writer at a time and an in-memory database is a single
    shared connection, so on SQLite the calls are serialized.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        bind = session_factory.kw.get("bind")
        self._dialect = bind.dialect.name if bind is not None else None
        self._lock = asyncio.Lock() if self._dialect == "sqlite" else None

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._lock if self._lock is not None else nullcontext():
            async with self._session_factory() as session:
                yield session

    async def find_exact(self, key: RepositoryKey, version: VersionId) -> ContentSnapshot | None:
        stmt = _where_key(select(t), key).where(t.c.version == version)
        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Snapshot lookup failed for {key}: {e}") from e
        return _row_to_snapshot(dict(row)) if row else None

    async def find_latest(self, key: RepositoryKey) -> ContentSnapshot | None:
        stmt = _where_key(select(t), key).order_by(t.c.created_at.desc()).limit(1)
        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Snapshot lookup failed for {key}: {e}") from e
        return _row_to_snapshot(dict(row)) if row else None

    async def list_versions(self, key: RepositoryKey) -> list[VersionInfo]:
        stmt = _where_key(select(t.c.version, t.c.created_at), key).order_by(
            t.c.created_at.desc()
        )
        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Version listing failed for {key}: {e}") from e
        return [
            VersionInfo(version=VersionId(r["version"]), created_at=_utc(r["created_at"]))
            for r in rows
        ]

    async def save(self, snapshot: ContentSnapshot) -> None:
        try:
            async with self._session() as session:
                dialect = postgresql if self._dialect == "postgresql" else sqlite
                stmt = (
                    dialect.insert(t)
                    .values(**_snapshot_to_row(snapshot))
                    .on_conflict_do_nothing(
                        index_elements=["provider", "organization", "repository", "version"]
                    )
                )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageUnavailableError(
                f"Snapshot save failed for {snapshot.key}@{snapshot.version}: {e}"
            ) from e
