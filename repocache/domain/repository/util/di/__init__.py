from repocache.domain.repository.util.di.provider import RepositoryProvider

__all__ = ["RepositoryProvider"]
