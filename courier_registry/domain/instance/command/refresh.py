import logging

from courier_registry.domain.instance.port.refresh_scheduler import RefreshScheduler
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.error import ServiceUnavailableError
from courier_registry.domain.shared.handler import Command, CommandHandler, Result

logger = logging.getLogger(__name__)


class RequestRefresh(Command):
    instance_link: str


class RefreshRequested(Result):
    message: str


class RequestRefreshHandler(CommandHandler[RequestRefresh, RefreshRequested]):
    """Look the instance up, then hand the refresh to the scheduler.

    Only the lookup is awaited; the probe and merge run detached and their
    outcome never reaches this caller.
    """

    registry_service: RegistryService
    refresh_scheduler: RefreshScheduler

    async def run(self, cmd: RequestRefresh) -> RefreshRequested:
        instance = await self.registry_service.get(cmd.instance_link)
        if not self.refresh_scheduler.submit(instance.link):
            raise ServiceUnavailableError("Registry is shutting down; refresh not scheduled")
        logger.debug("Refresh scheduled for %s", instance.link)
        return RefreshRequested(message="Instance refresh scheduled.")
