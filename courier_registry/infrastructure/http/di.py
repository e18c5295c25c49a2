"""DI provider for HTTP infrastructure."""

from typing import AsyncIterable, NewType

import httpx
from dishka import provide

from courier_registry.config import RegistryConfig
from courier_registry.domain.instance.port.metadata_probe import MetadataProbe
from courier_registry.infrastructure.http.metadata_probe import HttpMetadataProbe
from courier_registry.util.di.base import Provider, Scope

# Client dedicated to probing third-party instances
ProbeHttpClient = NewType("ProbeHttpClient", httpx.AsyncClient)


class HttpProvider(Provider):
    """DI provider for outbound HTTP adapters."""

    @provide(scope=Scope.APP)
    async def get_probe_http_client(self, config: RegistryConfig) -> AsyncIterable[ProbeHttpClient]:
        """Shared client for metadata probes, closed on container shutdown."""
        timeout = httpx.Timeout(config.verifier.timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            yield ProbeHttpClient(client)

    @provide(scope=Scope.APP, provides=MetadataProbe)
    def get_metadata_probe(self, client: ProbeHttpClient, config: RegistryConfig) -> HttpMetadataProbe:
        return HttpMetadataProbe(
            client=client,
            timeout_seconds=config.verifier.timeout_seconds,
            metadata_path=config.verifier.metadata_path,
        )
