"""In-memory doubles and builders for repository cache tests."""

from datetime import UTC, datetime, timedelta

from repocache.domain.repository.model.value import (
    ContentSnapshot,
    Provider,
    RepositoryKey,
    VersionId,
    VersionInfo,
)
from repocache.domain.repository.port.snapshot_store import SnapshotStore


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemorySnapshotStore(SnapshotStore):
    """Dict-backed store with the same idempotent-save contract as the SQL one."""

    def __init__(self) -> None:
        self.snapshots: dict[tuple[RepositoryKey, str], ContentSnapshot] = {}
        self.save_calls = 0

    async def find_exact(self, key: RepositoryKey, version: VersionId) -> ContentSnapshot | None:
        return self.snapshots.get((key, version))

    async def find_latest(self, key: RepositoryKey) -> ContentSnapshot | None:
        candidates = [s for (k, _), s in self.snapshots.items() if k == key]
        return max(candidates, key=lambda s: s.created_at, default=None)

    async def list_versions(self, key: RepositoryKey) -> list[VersionInfo]:
        candidates = [s for (k, _), s in self.snapshots.items() if k == key]
        candidates.sort(key=lambda s: s.created_at, reverse=True)
        return [VersionInfo(version=s.version, created_at=s.created_at) for s in candidates]

    async def save(self, snapshot: ContentSnapshot) -> None:
        self.save_calls += 1
        self.snapshots.setdefault((snapshot.key, snapshot.version), snapshot)

    def count(self, key: RepositoryKey) -> int:
        return sum(1 for k, _ in self.snapshots if k == key)


def make_key(
    organization: str = "org",
    repository: str = "repo",
    provider: Provider = Provider.GITHUB,
) -> RepositoryKey:
    return RepositoryKey(provider=provider, organization=organization, repository=repository)


def make_snapshot(
    key: RepositoryKey | None = None,
    version: str = "abc123",
    content: dict | None = None,
    age: timedelta = timedelta(0),
) -> ContentSnapshot:
    return ContentSnapshot(
        key=key or make_key(),
        version=VersionId(version),
        content=content if content is not None else {"blocks": [{"id": version}]},
        created_at=datetime.now(UTC) - age,
    )
