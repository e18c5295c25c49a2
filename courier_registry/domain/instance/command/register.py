from typing import Any

from courier_registry.domain.instance.model.aggregate import Instance
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.handler import Command, CommandHandler, Result


class RegisterInstance(Command):
    payload: Any  # Decoded JSON body, any shape; the normalizer validates it


class InstanceRegistered(Result):
    message: str
    instance: Instance


class RegisterInstanceHandler(CommandHandler[RegisterInstance, InstanceRegistered]):
    registry_service: RegistryService

    async def run(self, cmd: RegisterInstance) -> InstanceRegistered:
        instance = await self.registry_service.register(cmd.payload)
        return InstanceRegistered(
            message="Instance registered and verified successfully.",
            instance=instance,
        )
