"""Discovery REST routes (mobile clients)."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query

from courier_registry.domain.instance.query.list_instances import (
    InstanceList,
    ListInstances,
    ListInstancesHandler,
)

router = APIRouter(prefix="/instances", tags=["Instances"], route_class=DishkaRoute)


@router.get("", response_model=InstanceList)
async def list_instances(
    handler: FromDishka[ListInstancesHandler],
    lat: str | None = Query(default=None),
    lng: str | None = Query(default=None),
) -> InstanceList:
    """Verified instances, nearest first. Without ``lat``/``lng`` a default point is used."""
    return await handler.run(ListInstances(lat=lat, lng=lng))
