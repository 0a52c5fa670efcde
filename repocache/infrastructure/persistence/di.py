from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from repocache.config import Config
from repocache.domain.repository.port.snapshot_store import SnapshotStore
from repocache.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from repocache.infrastructure.persistence.repository.snapshot import SQLAlchemySnapshotStore
from repocache.util.di.base import Provider
from repocache.util.di.scope import Scope


class PersistenceProvider(Provider):
    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> AsyncEngine:
        return create_db_engine(config)

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # APP-scoped: the store opens a session per call and is shared by
    # coalesced operations that outlive any single request.
    snapshot_store = provide(
        SQLAlchemySnapshotStore, scope=Scope.APP, provides=SnapshotStore
    )
