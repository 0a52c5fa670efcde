from datetime import datetime

from pydantic import BaseModel

from repocache.domain.repository.model.value import Provider, RepositoryKey
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.shared.query import Query, QueryHandler, Result


class ListVersions(Query):
    key: RepositoryKey


class VersionSummary(BaseModel):
    version: str
    created_at: datetime


class VersionList(Result):
    provider: Provider
    organization: str
    repository: str
    versions: list[VersionSummary]


class ListVersionsHandler(QueryHandler[ListVersions, VersionList]):
    cache_service: RepositoryCacheService

    async def run(self, query: ListVersions) -> VersionList:
        versions = await self.cache_service.list_versions(query.key)
        return VersionList(
            provider=query.key.provider,
            organization=query.key.organization,
            repository=query.key.repository,
            versions=[
                VersionSummary(version=v.version, created_at=v.created_at) for v in versions
            ],
        )
