from dishka import provide

from repocache.config import Config
from repocache.domain.repository.command.invalidate_freshness import InvalidateFreshnessHandler
from repocache.domain.repository.port.snapshot_store import SnapshotStore
from repocache.domain.repository.port.upstream import UpstreamSource
from repocache.domain.repository.query.get_by_version import GetByVersionHandler
from repocache.domain.repository.query.get_latest_version import GetLatestVersionHandler
from repocache.domain.repository.query.get_repository import GetRepositoryHandler
from repocache.domain.repository.query.list_versions import ListVersionsHandler
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.repository.service.coalescer import RequestCoalescer
from repocache.domain.repository.service.freshness import FreshnessTracker
from repocache.util.di.base import Provider
from repocache.util.di.scope import Scope


class RepositoryProvider(Provider):
    # Process-wide state: hints and in-flight operations must be shared by
    # every request.
    @provide(scope=Scope.APP)
    def get_freshness_tracker(self, config: Config) -> FreshnessTracker:
        return FreshnessTracker(ttl_seconds=config.freshness.ttl_seconds)

    @provide(scope=Scope.APP)
    def get_coalescer(self) -> RequestCoalescer:
        return RequestCoalescer()

    @provide(scope=Scope.APP)
    def get_cache_service(
        self,
        store: SnapshotStore,
        upstream: UpstreamSource,
        freshness: FreshnessTracker,
        coalescer: RequestCoalescer,
    ) -> RepositoryCacheService:
        return RepositoryCacheService(
            store=store,
            upstream=upstream,
            freshness=freshness,
            coalescer=coalescer,
        )

    # Query Handlers
    get_repository_handler = provide(GetRepositoryHandler, scope=Scope.UOW)
    get_by_version_handler = provide(GetByVersionHandler, scope=Scope.UOW)
    list_versions_handler = provide(ListVersionsHandler, scope=Scope.UOW)
    get_latest_version_handler = provide(GetLatestVersionHandler, scope=Scope.UOW)

    # Command Handlers
    invalidate_freshness_handler = provide(InvalidateFreshnessHandler, scope=Scope.UOW)
