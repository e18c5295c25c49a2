from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from courier_registry.config import RegistryConfig
from courier_registry.domain.instance.port.repository import InstanceRepository
from courier_registry.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from courier_registry.infrastructure.persistence.repository.instance import (
    PostgresInstanceRepository,
)
from courier_registry.util.di.base import Provider, Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    async def get_engine(self, config: RegistryConfig) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session (one per unit of work). Repositories commit their own
    # writes; closing the session rolls back anything left open.
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session

    # UOW-scoped repositories
    instance_repo = provide(
        PostgresInstanceRepository, scope=Scope.UOW, provides=InstanceRepository
    )
