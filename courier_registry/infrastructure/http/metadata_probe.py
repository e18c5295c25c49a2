"""HTTP adapter for the MetadataProbe port."""

import asyncio
import json
import logging

import httpx

from courier_registry.domain.instance.model.probe import ProbeFailureReason, ProbeResult
from courier_registry.domain.instance.port.metadata_probe import MetadataProbe

logger = logging.getLogger(__name__)


def resolve_metadata_url(link: str, metadata_path: str = "/metadata") -> httpx.URL | None:
    """Resolve the metadata endpoint for an instance link.

    ``metadata_path`` is absolute, so it replaces any path on ``link``:
    ``https://a.example/app`` -> ``https://a.example/metadata``.

    Returns:
        The probe URL, or None if ``link`` is not an absolute http(s) URL.
    """
    try:
        base = httpx.URL(link.strip())
    except (httpx.InvalidURL, TypeError):
        return None
    if base.scheme not in ("http", "https") or not base.host:
        return None
    return base.join(metadata_path)


class HttpMetadataProbe(MetadataProbe):
    """Probes ``<link>/metadata`` with a hard deadline using httpx.

    The deadline covers the whole exchange (connect, headers and body); when it
    expires the in-flight request is cancelled.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout_seconds: float = 5.0,
        metadata_path: str = "/metadata",
    ) -> None:
        self._client = client
        self._timeout = timeout_seconds
        self._metadata_path = metadata_path

    async def verify(self, link: str) -> ProbeResult:
        url = resolve_metadata_url(link, self._metadata_path)
        if url is None:
            logger.warning("Metadata probe rejected invalid link %r", link)
            return ProbeResult.failure(ProbeFailureReason.INVALID_LINK)

        result = await self._probe(str(url))
        if result.ok:
            logger.info("Metadata probe succeeded for %s", url)
        else:
            logger.warning(
                "Metadata probe failed for %s: %s (status %s)",
                url,
                result.reason,
                result.status_code,
            )
        return result

    async def _probe(self, url: str) -> ProbeResult:
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.get(url, headers={"Accept": "application/json"})
        except (TimeoutError, httpx.TimeoutException):
            return ProbeResult.failure(ProbeFailureReason.TIMEOUT, url=url)
        except httpx.HTTPError as e:
            logger.debug("Metadata probe transport error for %s: %s", url, e)
            return ProbeResult.failure(ProbeFailureReason.UNREACHABLE, url=url)

        if not response.is_success:
            return ProbeResult.failure(
                ProbeFailureReason.UNREACHABLE,
                url=url,
                status_code=response.status_code,
            )

        body = response.text
        if not body.strip():
            return ProbeResult.failure(
                ProbeFailureReason.EMPTY_RESPONSE,
                url=url,
                status_code=response.status_code,
            )

        try:
            document = json.loads(body)
        except ValueError:
            return ProbeResult.failure(
                ProbeFailureReason.INVALID_JSON,
                url=url,
                status_code=response.status_code,
            )

        return ProbeResult.success(url=url, document=document, status_code=response.status_code)
