from datetime import datetime

from courier_registry.domain.instance.model.value import InstanceStatus
from courier_registry.domain.instance.port.refresh_scheduler import RefreshScheduler
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.handler import Query, QueryHandler, Result


class GetRegistration(Query):
    instance_link: str


class RegistrationStatus(Result):
    instance_link: str
    status: InstanceStatus
    reason: str | None = None
    created_at: datetime
    last_fetched_at: datetime | None = None


class GetRegistrationHandler(QueryHandler[GetRegistration, RegistrationStatus]):
    """Registration status for an admin dashboard.

    ``reason`` carries the failure code of the latest refresh attempt made by
    this process, if that attempt failed. Outcomes that finished before the
    current registration was created belong to an earlier one and are ignored.
    """

    registry_service: RegistryService
    refresh_scheduler: RefreshScheduler

    async def run(self, query: GetRegistration) -> RegistrationStatus:
        instance = await self.registry_service.get(query.instance_link)
        outcome = self.refresh_scheduler.last_outcome(instance.link)
        if outcome is not None and outcome.finished_at < instance.created_at:
            outcome = None
        return RegistrationStatus(
            instance_link=instance.link,
            status=instance.status,
            reason=outcome.reason if outcome is not None and outcome.failed else None,
            created_at=instance.created_at,
            last_fetched_at=instance.last_fetched_at,
        )
