from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from courier_registry.domain.instance.model.value import InstanceStatus


class Instance(BaseModel):
    """A registered courier-service deployment, as stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    link: str
    websocket_link: str
    region: dict[str, Any] | None = None
    image_url: str | None = None
    user_count: int = 0
    status: InstanceStatus = InstanceStatus.PENDING
    last_fetched_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class RankedInstance(Instance):
    """An instance annotated with its great-circle distance from a reference point.

    ``distance_meters`` is None when the instance has no region.
    """

    distance_meters: float | None = None
