"""Dependency injection provider for the refresh worker."""

import logging

from dishka import AsyncContainer, provide

from courier_registry.config import RegistryConfig
from courier_registry.domain.instance.port.refresh_scheduler import RefreshScheduler
from courier_registry.infrastructure.refresh.worker import RefreshPool
from courier_registry.util.di.base import Provider, Scope

logger = logging.getLogger(__name__)


class RefreshProvider(Provider):
    """RefreshPool is an APP-scoped singleton, also exposed as the RefreshScheduler port."""

    @provide(scope=Scope.APP)
    def get_refresh_pool(self, container: AsyncContainer, config: RegistryConfig) -> RefreshPool:
        pool = RefreshPool(container=container, shutdown_timeout=config.refresh.shutdown_timeout)
        logger.debug("RefreshPool created (shutdown_timeout=%ss)", config.refresh.shutdown_timeout)
        return pool

    @provide(scope=Scope.APP)
    def get_refresh_scheduler(self, pool: RefreshPool) -> RefreshScheduler:
        return pool
