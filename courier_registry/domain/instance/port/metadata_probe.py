"""MetadataProbe port - liveness check against an instance's metadata endpoint."""

from typing import Protocol

from courier_registry.domain.instance.model.probe import ProbeResult


class MetadataProbe(Protocol):
    async def verify(self, link: str) -> ProbeResult:
        """Fetch and parse the metadata document served under ``link``.

        Never raises for network or content problems; those are reported as a
        failed ProbeResult with a reason code.
        """
        ...
