"""Registration REST routes (instance operators and admin dashboard)."""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Body, Query

from courier_registry.domain.instance.command.delete import (
    DeleteRegistration,
    DeleteRegistrationHandler,
    RegistrationDeleted,
)
from courier_registry.domain.instance.command.refresh import (
    RefreshRequested,
    RequestRefresh,
    RequestRefreshHandler,
)
from courier_registry.domain.instance.command.register import (
    InstanceRegistered,
    RegisterInstance,
    RegisterInstanceHandler,
)
from courier_registry.domain.instance.query.get_registration import (
    GetRegistration,
    GetRegistrationHandler,
    RegistrationStatus,
)
from courier_registry.domain.shared.error import ValidationError

router = APIRouter(prefix="/registrations", tags=["Registrations"], route_class=DishkaRoute)


def _require_link(value: str | None, source: str) -> str:
    if not value:
        raise ValidationError(f"{source} is required", fields=["instanceLink"])
    return value


@router.post("", response_model=InstanceRegistered, status_code=201)
async def register_instance(
    handler: FromDishka[RegisterInstanceHandler],
    payload: Any = Body(default=None),
) -> InstanceRegistered:
    return await handler.run(RegisterInstance(payload=payload))


@router.get("", response_model=RegistrationStatus)
async def get_registration(
    handler: FromDishka[GetRegistrationHandler],
    instance_link: str | None = Query(default=None, alias="instanceLink"),
) -> RegistrationStatus:
    link = _require_link(instance_link, "instanceLink query parameter")
    return await handler.run(GetRegistration(instance_link=link))


@router.post("/refresh", response_model=RefreshRequested, status_code=202)
async def refresh_registration(
    handler: FromDishka[RequestRefreshHandler],
    body: dict[str, Any] | None = Body(default=None),
) -> RefreshRequested:
    link = (body or {}).get("instanceLink")
    if not isinstance(link, str):
        link = None
    link = _require_link(link, "instanceLink body field")
    return await handler.run(RequestRefresh(instance_link=link))


@router.delete("", response_model=RegistrationDeleted)
async def delete_registration(
    handler: FromDishka[DeleteRegistrationHandler],
    instance_link: str | None = Query(default=None, alias="instanceLink"),
    instance_link_lower: str | None = Query(default=None, alias="instancelink"),
) -> RegistrationDeleted:
    link = _require_link(instance_link_lower or instance_link, "instanceLink query parameter")
    return await handler.run(DeleteRegistration(instance_link=link))
