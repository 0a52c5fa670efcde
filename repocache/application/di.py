from dishka import AsyncContainer, from_context, make_async_container

from repocache.config import Config
from repocache.domain.repository.util.di import RepositoryProvider
from repocache.infrastructure.http import HttpProvider
from repocache.infrastructure.persistence import PersistenceProvider
from repocache.util.di.base import Provider
from repocache.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        HttpProvider(),
        RepositoryProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
