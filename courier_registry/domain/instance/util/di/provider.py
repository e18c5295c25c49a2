from dishka import provide

from courier_registry.config import RegistryConfig
from courier_registry.domain.instance.command.delete import DeleteRegistrationHandler
from courier_registry.domain.instance.command.refresh import RequestRefreshHandler
from courier_registry.domain.instance.command.register import RegisterInstanceHandler
from courier_registry.domain.instance.model.value import GeoPoint
from courier_registry.domain.instance.port.metadata_probe import MetadataProbe
from courier_registry.domain.instance.port.repository import InstanceRepository
from courier_registry.domain.instance.query.get_registration import GetRegistrationHandler
from courier_registry.domain.instance.query.list_instances import ListInstancesHandler
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.util.di.base import Provider, Scope


class InstanceProvider(Provider):
    @provide(scope=Scope.APP)
    def get_default_point(self, config: RegistryConfig) -> GeoPoint:
        return GeoPoint(
            latitude=config.discovery.default_latitude,
            longitude=config.discovery.default_longitude,
        )

    @provide(scope=Scope.UOW)
    def get_registry_service(
        self,
        instance_repo: InstanceRepository,
        metadata_probe: MetadataProbe,
        default_point: GeoPoint,
    ) -> RegistryService:
        return RegistryService(
            instance_repo=instance_repo,
            metadata_probe=metadata_probe,
            default_point=default_point,
        )

    # Command handlers
    register_handler = provide(RegisterInstanceHandler, scope=Scope.UOW)
    refresh_handler = provide(RequestRefreshHandler, scope=Scope.UOW)
    delete_handler = provide(DeleteRegistrationHandler, scope=Scope.UOW)

    # Query handlers
    list_instances_handler = provide(ListInstancesHandler, scope=Scope.UOW)
    get_registration_handler = provide(GetRegistrationHandler, scope=Scope.UOW)
