from dishka import AsyncContainer, from_context, make_async_container
from starlette.requests import Request

from courier_registry.config import RegistryConfig
from courier_registry.domain.instance.util.di import InstanceProvider
from courier_registry.infrastructure.http.di import HttpProvider
from courier_registry.infrastructure.persistence.di import PersistenceProvider
from courier_registry.infrastructure.refresh.di import RefreshProvider
from courier_registry.util.di.base import Provider, Scope


class ContextProvider(Provider):
    """Values handed to the container from outside: config at startup, request per UOW."""

    config = from_context(provides=RegistryConfig, scope=Scope.APP)
    request = from_context(provides=Request, scope=Scope.UOW)


def create_container(config: RegistryConfig, *providers: Provider) -> AsyncContainer:
    """Build the application container.

    Extra ``providers`` are appended after the defaults and override them;
    tests use this to swap in fakes.
    """
    return make_async_container(
        ContextProvider(),
        PersistenceProvider(),
        HttpProvider(),
        RefreshProvider(),
        InstanceProvider(),
        *providers,
        context={RegistryConfig: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
