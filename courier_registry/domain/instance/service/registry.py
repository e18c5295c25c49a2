import logging
from datetime import UTC, datetime
from typing import Any

from courier_registry.domain.instance.model.aggregate import Instance, RankedInstance
from courier_registry.domain.instance.model.probe import ProbeResult
from courier_registry.domain.instance.model.refresh import RefreshOutcome, RefreshStatus
from courier_registry.domain.instance.model.value import GeoPoint
from courier_registry.domain.instance.port.metadata_probe import MetadataProbe
from courier_registry.domain.instance.port.repository import InstanceRepository
from courier_registry.domain.instance.service.normalizer import (
    normalize_payload,
    unwrap_envelope,
)
from courier_registry.domain.shared.error import (
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
    VerificationError,
)
from courier_registry.domain.shared.handler import Service

logger = logging.getLogger(__name__)


def _verification_error(result: ProbeResult) -> VerificationError:
    assert result.reason is not None
    return VerificationError(
        result.describe(),
        reason=result.reason.value,
        status_code=result.status_code,
    )


class RegistryService(Service):
    instance_repo: InstanceRepository
    metadata_probe: MetadataProbe
    default_point: GeoPoint

    async def register(self, payload: Any) -> Instance:
        """Normalize, verify and store a new instance registration.

        Nothing is written unless the metadata probe succeeds. A missing body
        counts as an empty object, so every required field is reported.
        """
        details = normalize_payload({} if payload is None else payload)
        assert details.link is not None

        result = await self.metadata_probe.verify(details.link)
        if not result.ok:
            logger.info(
                "Rejected registration for %s: %s",
                details.link,
                result.reason,
            )
            raise _verification_error(result)

        instance = await self.instance_repo.insert(details)
        logger.info("Registered instance %s (%s)", instance.link, instance.id)
        return instance

    async def get(self, link: str) -> Instance:
        instance = await self.instance_repo.find_by_link(link)
        if instance is None:
            raise NotFoundError(f"Instance not found: {link}")
        return instance

    async def delete(self, link: str) -> None:
        deleted = await self.instance_repo.delete_by_link(link)
        if not deleted:
            raise NotFoundError(f"Instance not found: {link}")
        logger.info("Deleted instance registration %s", link)

    async def list_nearby(self, point: GeoPoint | None = None) -> list[RankedInstance]:
        """Verified instances ranked by distance from ``point`` (or the default point)."""
        return await self.instance_repo.list_verified(point or self.default_point)

    async def refresh(self, link: str) -> RefreshOutcome:
        """Re-probe an instance and merge its current metadata into the stored row.

        Failures are reported in the returned outcome, never raised. A failed
        probe leaves the row (including ``last_fetched_at``) untouched.
        """
        result = await self.metadata_probe.verify(link)
        if not result.ok:
            logger.warning(
                "Refresh of %s failed: %s (status %s)",
                link,
                result.reason,
                result.status_code,
            )
            return self._outcome(
                link,
                RefreshStatus.FAILED,
                reason=result.reason.value if result.reason else None,
                status_code=result.status_code,
            )

        try:
            details = normalize_payload(
                unwrap_envelope(result.document),
                require_complete=False,
            )
        except ValidationError as e:
            logger.warning("Refresh of %s returned unusable metadata: %s", link, e.message)
            return self._outcome(link, RefreshStatus.FAILED, reason="invalid-metadata")

        try:
            instance = await self.instance_repo.merge_update(link, details)
        except StorageUnavailableError as e:
            logger.error("Refresh of %s could not be stored: %s", link, e.message)
            return self._outcome(link, RefreshStatus.FAILED, reason="storage-error")

        if instance is None:
            logger.warning("Refresh of %s skipped: instance no longer registered", link)
            return self._outcome(link, RefreshStatus.FAILED, reason="not-found")

        logger.info("Refreshed instance %s", link)
        return self._outcome(link, RefreshStatus.REFRESHED, status_code=result.status_code)

    @staticmethod
    def _outcome(
        link: str,
        status: RefreshStatus,
        reason: str | None = None,
        status_code: int | None = None,
    ) -> RefreshOutcome:
        return RefreshOutcome(
            link=link,
            status=status,
            reason=reason,
            status_code=status_code,
            finished_at=datetime.now(UTC),
        )
