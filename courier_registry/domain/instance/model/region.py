"""GeoJSON region validation.

Instances advertise their service area as GeoJSON. PostGIS stores geometries,
not features, so every region is reduced to one canonical geometry before it
reaches the store:

- Point, Polygon, MultiPolygon and GeometryCollection pass through unchanged.
- A FeatureCollection becomes a GeometryCollection of its feature geometries.
- A single Feature becomes its geometry.

Coordinates are (longitude, latitude[, altitude]) in EPSG:4326.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from courier_registry.domain.shared.error import ValidationError
from courier_registry.domain.shared.model.value import ValueObject

SRID = 4326

Position = Annotated[list[float], Field(min_length=2, max_length=3)]
LinearRing = Annotated[list[Position], Field(min_length=4)]


def _check_position(position: list[float]) -> None:
    lng, lat = position[0], position[1]
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"longitude {lng} out of range")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude {lat} out of range")


def _check_polygon(rings: list[list[list[float]]]) -> None:
    for ring in rings:
        for position in ring:
            _check_position(position)
        if ring[0] != ring[-1]:
            raise ValueError("linear ring is not closed")


class PointGeometry(ValueObject):
    type: Literal["Point"]
    coordinates: Position

    @field_validator("coordinates")
    @classmethod
    def _in_range(cls, v: list[float]) -> list[float]:
        _check_position(v)
        return v


class PolygonGeometry(ValueObject):
    type: Literal["Polygon"]
    coordinates: Annotated[list[LinearRing], Field(min_length=1)]

    @field_validator("coordinates")
    @classmethod
    def _closed_rings(cls, v: list) -> list:
        _check_polygon(v)
        return v


class MultiPolygonGeometry(ValueObject):
    type: Literal["MultiPolygon"]
    coordinates: Annotated[list[Annotated[list[LinearRing], Field(min_length=1)]], Field(min_length=1)]

    @field_validator("coordinates")
    @classmethod
    def _closed_rings(cls, v: list) -> list:
        for polygon in v:
            _check_polygon(polygon)
        return v


class GeometryCollection(ValueObject):
    type: Literal["GeometryCollection"]
    geometries: Annotated[list["Geometry"], Field(min_length=1)]


Geometry = Annotated[
    Union[PointGeometry, PolygonGeometry, MultiPolygonGeometry, GeometryCollection],
    Field(discriminator="type"),
]


class Feature(ValueObject):
    type: Literal["Feature"]
    geometry: Geometry | None = None
    properties: dict[str, Any] | None = None


class FeatureCollection(ValueObject):
    type: Literal["FeatureCollection"]
    features: list[Feature]


GeometryCollection.model_rebuild()

_region_adapter: TypeAdapter[Any] = TypeAdapter(
    Annotated[
        Union[
            PointGeometry,
            PolygonGeometry,
            MultiPolygonGeometry,
            GeometryCollection,
            Feature,
            FeatureCollection,
        ],
        Field(discriminator="type"),
    ]
)


def parse_region(value: Any) -> dict[str, Any]:
    """Validate a GeoJSON region and return its canonical geometry dict.

    Raises:
        ValidationError: If the value is not one of the accepted GeoJSON shapes,
            or a FeatureCollection/Feature carries no geometry.
    """
    try:
        region = _region_adapter.validate_python(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid GeoJSON region: {e.errors()[0]['msg']}", fields=["region"]) from e

    if isinstance(region, Feature):
        if region.geometry is None:
            raise ValidationError("GeoJSON Feature region has no geometry", fields=["region"])
        region = region.geometry
    elif isinstance(region, FeatureCollection):
        geometries = [f.geometry for f in region.features if f.geometry is not None]
        if not geometries:
            raise ValidationError("GeoJSON FeatureCollection region has no geometries", fields=["region"])
        region = GeometryCollection(type="GeometryCollection", geometries=geometries)

    return region.model_dump(mode="json")
