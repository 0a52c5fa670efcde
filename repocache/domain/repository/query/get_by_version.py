from pydantic import Field

from repocache.domain.repository.model.value import RepositoryKey, VersionId
from repocache.domain.repository.query.get_repository import RepositoryContent
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.shared.query import Query, QueryHandler


class GetByVersion(Query):
    key: RepositoryKey
    version: str = Field(min_length=7, max_length=40)


class GetByVersionHandler(QueryHandler[GetByVersion, RepositoryContent]):
    cache_service: RepositoryCacheService

    async def run(self, query: GetByVersion) -> RepositoryContent:
        result = await self.cache_service.get_exact(query.key, VersionId(query.version))
        return RepositoryContent(
            content=result.content,
            version=result.version,
            cached=result.cached,
            provider=result.key.provider,
            organization=result.key.organization,
            repository=result.key.repository,
        )
