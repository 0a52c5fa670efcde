"""Fixtures for repository cache domain tests."""

from unittest.mock import AsyncMock

import pytest
from repository_fakes import FakeClock, InMemorySnapshotStore

from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.repository.service.coalescer import RequestCoalescer
from repocache.domain.repository.service.freshness import FreshnessTracker


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def freshness(clock: FakeClock) -> FreshnessTracker:
    return FreshnessTracker(ttl_seconds=60, clock=clock)


@pytest.fixture
def store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def upstream() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def coalescer() -> RequestCoalescer:
    return RequestCoalescer()


@pytest.fixture
def service(
    store: InMemorySnapshotStore,
    upstream: AsyncMock,
    freshness: FreshnessTracker,
    coalescer: RequestCoalescer,
) -> RepositoryCacheService:
    return RepositoryCacheService(
        store=store,
        upstream=upstream,
        freshness=freshness,
        coalescer=coalescer,
    )
