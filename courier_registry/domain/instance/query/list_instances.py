from pydantic import ValidationError as PydanticValidationError

from courier_registry.domain.instance.model.aggregate import RankedInstance
from courier_registry.domain.instance.model.value import GeoPoint
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.error import ValidationError
from courier_registry.domain.shared.handler import Query, QueryHandler, Result


class ListInstances(Query):
    """Raw ``lat``/``lng`` query parameters; both must be given to form a point."""

    lat: str | None = None
    lng: str | None = None


class InstanceList(Result):
    instances: list[RankedInstance]
    count: int


def parse_reference_point(lat: str | None, lng: str | None) -> GeoPoint | None:
    """Parse a caller-supplied reference point.

    Returns None when either coordinate is absent.

    Raises:
        ValidationError: A supplied coordinate is not a finite number in range.
    """
    if lat is None or lng is None:
        return None
    try:
        return GeoPoint(latitude=float(lat), longitude=float(lng))
    except (ValueError, PydanticValidationError) as e:
        raise ValidationError("Invalid latitude or longitude", fields=["lat", "lng"]) from e


class ListInstancesHandler(QueryHandler[ListInstances, InstanceList]):
    registry_service: RegistryService

    async def run(self, query: ListInstances) -> InstanceList:
        point = parse_reference_point(query.lat, query.lng)
        instances = await self.registry_service.list_nearby(point)
        return InstanceList(instances=instances, count=len(instances))
