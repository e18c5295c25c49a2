from courier_registry.domain.instance.port.refresh_scheduler import RefreshScheduler
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.handler import Command, CommandHandler, Result


class DeleteRegistration(Command):
    instance_link: str


class RegistrationDeleted(Result):
    message: str


class DeleteRegistrationHandler(CommandHandler[DeleteRegistration, RegistrationDeleted]):
    registry_service: RegistryService
    refresh_scheduler: RefreshScheduler

    async def run(self, cmd: DeleteRegistration) -> RegistrationDeleted:
        await self.registry_service.delete(cmd.instance_link)
        self.refresh_scheduler.forget(cmd.instance_link)
        return RegistrationDeleted(message="Instance registration deleted")
