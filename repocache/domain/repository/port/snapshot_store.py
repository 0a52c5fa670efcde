"""Port for durable, immutable content snapshots."""

from abc import abstractmethod
from typing import Protocol

from repocache.domain.repository.model.value import (
    ContentSnapshot,
    RepositoryKey,
    VersionId,
    VersionInfo,
)
from repocache.domain.shared.port import Port


class SnapshotStore(Port, Protocol):
    """Versioned store of content snapshots, unique per (key, version).

    Implementations raise StorageUnavailableError when the backend is down.
    """

    @abstractmethod
    async def find_exact(self, key: RepositoryKey, version: VersionId) -> ContentSnapshot | None:
        """Point lookup, exact match on both key and version."""
        ...

    @abstractmethod
    async def find_latest(self, key: RepositoryKey) -> ContentSnapshot | None:
        """Snapshot with the greatest created_at for key."""
        ...

    @abstractmethod
    async def list_versions(self, key: RepositoryKey) -> list[VersionInfo]:
        """All stored versions for key, newest first."""
        ...

    @abstractmethod
    async def save(self, snapshot: ContentSnapshot) -> None:
        """Idempotent insert. A duplicate (key, version) is a no-op."""
        ...
