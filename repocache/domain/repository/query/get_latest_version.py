"""Lightweight update check: the latest version without its content."""

from repocache.domain.repository.model.value import Provider, RepositoryKey
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.shared.query import Query, QueryHandler, Result


class GetLatestVersion(Query):
    key: RepositoryKey


class LatestVersion(Result):
    provider: Provider
    organization: str
    repository: str
    version: str


class GetLatestVersionHandler(QueryHandler[GetLatestVersion, LatestVersion]):
    cache_service: RepositoryCacheService

    async def run(self, query: GetLatestVersion) -> LatestVersion:
        version = await self.cache_service.get_latest_version_id(query.key)
        return LatestVersion(
            provider=query.key.provider,
            organization=query.key.organization,
            repository=query.key.repository,
            version=version,
        )
