import math
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from courier_registry.domain.instance.model.region import parse_region
from courier_registry.domain.shared.model.value import ValueObject


class InstanceStatus(StrEnum):
    PENDING = "pending"
    VERIFIED = "verified"


class GeoPoint(ValueObject):
    """Reference point for distance ranking, in degrees."""

    latitude: float
    longitude: float

    @field_validator("latitude")
    @classmethod
    def _latitude_in_range(cls, v: float) -> float:
        if not math.isfinite(v) or not -90.0 <= v <= 90.0:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @field_validator("longitude")
    @classmethod
    def _longitude_in_range(cls, v: float) -> float:
        if not math.isfinite(v) or not -180.0 <= v <= 180.0:
            raise ValueError("longitude must be between -180 and 180")
        return v


# Fields every registration must carry after normalization, in reporting order.
REQUIRED_DETAIL_FIELDS: tuple[str, ...] = (
    "name",
    "link",
    "websocketLink",
    "region",
    "imageUrl",
    "userCount",
)


class InstanceDetails(ValueObject):
    """Canonical instance-detail record produced by the payload normalizer.

    Every field is optional so the same record serves registration (where the
    required fields are checked separately) and refresh merges (where a null
    field means "keep the stored value"). ``region`` holds the canonical
    GeoJSON geometry returned by :func:`parse_region`.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    name: str | None = None
    link: str | None = None
    websocket_link: str | None = None
    region: dict[str, Any] | None = None
    image_url: str | None = None
    user_count: Annotated[int, Field(ge=0)] | None = None
    rules_url: str | None = None
    description_url: str | None = None
    terms_of_service_url: str | None = None
    privacy_policy_url: str | None = None
    updated_at: datetime | None = None

    @field_validator("region", mode="before")
    @classmethod
    def _canonical_region(cls, v: Any) -> Any:
        if v is None:
            return None
        return parse_region(v)
