"""Tests for the repository and health REST routes.

The app runs against a migrated SQLite file; only the upstream provider is faked.
"""

import base64
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from dishka import make_async_container, provide
from fastapi.testclient import TestClient

from repocache.application.api.rest.app import create_app
from repocache.application.di import ConfigProvider
from repocache.config import Config, DatabaseConfig, LoggingConfig
from repocache.domain.repository.model.value import FetchedContent, VersionId
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.domain.repository.util.di import RepositoryProvider
from repocache.domain.shared.error import (
    InvalidFormatError,
    NotFoundError,
    RateLimitedError,
    UpstreamError,
)
from repocache.infrastructure.persistence import PersistenceProvider
from repocache.util.di.base import Provider
from repocache.util.di.scope import Scope

SHA = "0123456789abcdef0123456789abcdef01234567"
CONTENT = {"blocks": [{"id": "intro", "body": base64.b64encode(b"hi").decode()}]}
BASE = "/api/v1/repositories/github/acme/docs"


class FakeUpstreamProvider(Provider):
    def __init__(self, upstream: UpstreamSource) -> None:
        super().__init__()
        self._upstream = upstream

    @provide(scope=Scope.APP)
    def get_upstream(self) -> UpstreamSource:
        return self._upstream


@pytest.fixture
def upstream() -> AsyncMock:
    upstream = AsyncMock()
    upstream.resolve_latest_version.return_value = VersionId(SHA)
    upstream.fetch_content.side_effect = lambda key, version=None: FetchedContent(
        content=CONTENT, version=version or VersionId(SHA)
    )
    return upstream


@pytest.fixture
def client(tmp_path: Path, upstream: AsyncMock):
    config = Config(
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'repocache.db'}"),
        logging=LoggingConfig(logfire=False),
    )
    container = make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        RepositoryProvider(),
        FakeUpstreamProvider(upstream),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]
    )
    with TestClient(create_app(config, container)) as test_client:
        yield test_client


class TestGetRepository:
    def test_first_read_fetches_then_serves_from_cache(
        self, client: TestClient, upstream: AsyncMock
    ):
        first = client.get(BASE)
        second = client.get(BASE)

        assert first.status_code == 200
        body = first.json()
        assert body["content"] == CONTENT
        assert body["version"] == SHA
        assert body["cached"] is False
        assert body["provider"] == "github"
        assert body["organization"] == "acme"
        assert body["repository"] == "docs"
        assert second.json()["cached"] is True
        upstream.resolve_latest_version.assert_awaited_once()

    def test_unknown_provider_is_rejected(self, client: TestClient):
        response = client.get("/api/v1/repositories/bitbucket/acme/docs")

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["field"] == "provider"
        assert body["message"].startswith("provider: ")

    def test_not_found(self, client: TestClient, upstream: AsyncMock):
        upstream.resolve_latest_version.side_effect = NotFoundError(
            "Repository acme/docs not found"
        )

        response = client.get(BASE)

        assert response.status_code == 404
        assert response.json() == {
            "code": "NotFoundError",
            "message": "Repository acme/docs not found",
        }

    def test_invalid_artifact(self, client: TestClient, upstream: AsyncMock):
        upstream.fetch_content.side_effect = InvalidFormatError("bad artifact")

        response = client.get(BASE)

        assert response.status_code == 422
        assert response.json()["code"] == "InvalidFormatError"

    def test_rate_limited_without_cached_copy(self, client: TestClient, upstream: AsyncMock):
        upstream.resolve_latest_version.side_effect = RateLimitedError("slow down", 42)

        response = client.get(BASE)

        assert response.status_code == 429
        assert response.headers["retry-after"] == "42"
        assert response.json()["code"] == "RATE_LIMITED"

    def test_upstream_failure_without_cached_copy(
        self, client: TestClient, upstream: AsyncMock
    ):
        upstream.resolve_latest_version.side_effect = UpstreamError("GitHub returned HTTP 500")

        assert client.get(BASE).status_code == 502

    def test_upstream_failure_after_invalidation_serves_stale_copy(
        self, client: TestClient, upstream: AsyncMock
    ):
        client.get(BASE)
        client.delete(f"{BASE}/freshness")
        upstream.resolve_latest_version.side_effect = UpstreamError("network down")

        response = client.get(BASE)

        assert response.status_code == 200
        assert response.json()["cached"] is True
        assert response.json()["version"] == SHA


class TestGetByVersion:
    def test_fetches_exact_version(self, client: TestClient, upstream: AsyncMock):
        response = client.get(f"{BASE}/commits/abc1234")

        assert response.status_code == 200
        assert response.json()["version"] == "abc1234"
        upstream.fetch_content.assert_awaited_once()
        upstream.resolve_latest_version.assert_not_awaited()

    @pytest.mark.parametrize("version", ["abc12", "a" * 41])
    def test_version_length_is_validated(self, client: TestClient, version: str):
        response = client.get(f"{BASE}/commits/{version}")

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert response.json()["field"] == "version"


class TestVersionsAndLatest:
    def test_versions_lists_cached_snapshots(self, client: TestClient):
        client.get(BASE)
        client.get(f"{BASE}/commits/abc1234")

        response = client.get(f"{BASE}/versions")

        assert response.status_code == 200
        versions = [v["version"] for v in response.json()["versions"]]
        assert sorted(versions) == sorted([SHA, "abc1234"])

    def test_versions_for_uncached_repository_is_empty(self, client: TestClient):
        response = client.get(f"{BASE}/versions")

        assert response.status_code == 200
        assert response.json()["versions"] == []

    def test_latest_returns_version_without_fetching_content(
        self, client: TestClient, upstream: AsyncMock
    ):
        response = client.get(f"{BASE}/latest")

        assert response.status_code == 200
        assert response.json()["version"] == SHA
        upstream.fetch_content.assert_not_awaited()


class TestFreshnessInvalidation:
    def test_invalidate_one_repository(self, client: TestClient, upstream: AsyncMock):
        client.get(BASE)

        response = client.delete(f"{BASE}/freshness")
        client.get(BASE)

        assert response.status_code == 200
        assert response.json() == {"cleared": 1}
        assert upstream.resolve_latest_version.await_count == 2

    def test_clear_all(self, client: TestClient):
        client.get(BASE)
        client.get("/api/v1/repositories/gitlab/acme/docs")

        response = client.delete("/api/v1/repositories/freshness")

        assert response.json() == {"cleared": 2}


class TestHealth:
    def test_health_reports_database(self, client: TestClient):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "checks": {"database": "up"},
            "pending_requests": 0,
        }

    def test_live(self, client: TestClient):
        assert client.get("/api/v1/health/live").json() == {"status": "ok"}

    def test_ready(self, client: TestClient):
        response = client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}
