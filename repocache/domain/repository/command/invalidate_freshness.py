"""Drop freshness hints so the next read re-resolves the latest version."""

from repocache.domain.repository.model.value import RepositoryKey
from repocache.domain.repository.service.cache import RepositoryCacheService
from repocache.domain.shared.command import Command, CommandHandler, Result


class InvalidateFreshness(Command):
    key: RepositoryKey | None = None  # None clears every hint


class FreshnessInvalidated(Result):
    cleared: int


class InvalidateFreshnessHandler(CommandHandler[InvalidateFreshness, FreshnessInvalidated]):
    cache_service: RepositoryCacheService

    async def run(self, cmd: InvalidateFreshness) -> FreshnessInvalidated:
        before = len(self.cache_service.freshness)
        if cmd.key is None:
            self.cache_service.clear()
        else:
            self.cache_service.invalidate(cmd.key)
        return FreshnessInvalidated(cleared=before - len(self.cache_service.freshness))
