from repocache.domain.repository.model.value import Content, Provider, RepositoryKey
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.shared.query import Query, QueryHandler, Result


class GetRepository(Query):
    key: RepositoryKey


class RepositoryContent(Result):
    content: Content
    version: str
    cached: bool
    provider: Provider
    organization: str
    repository: str


class GetRepositoryHandler(QueryHandler[GetRepository, RepositoryContent]):
    cache_service: RepositoryCacheService

    async def run(self, query: GetRepository) -> RepositoryContent:
        result = await self.cache_service.get_latest(query.key)
        return RepositoryContent(
            content=result.content,
            version=result.version,
            cached=result.cached,
            provider=result.key.provider,
            organization=result.key.organization,
            repository=result.key.repository,
        )
