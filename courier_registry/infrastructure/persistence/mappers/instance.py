import json
from typing import Any, Mapping

from geoalchemy2 import functions as geo_func
from sqlalchemy import ColumnElement

from courier_registry.domain.instance.model.aggregate import Instance, RankedInstance
from courier_registry.domain.instance.model.region import SRID
from courier_registry.domain.instance.model.value import InstanceDetails, InstanceStatus

# InstanceDetails attribute -> instances column, for fields a merge may overwrite.
MERGEABLE_COLUMNS: dict[str, str] = {
    "name": "name",
    "websocket_link": "websocket_link",
    "region": "region",
    "image_url": "image_url",
    "user_count": "user_count",
}


def region_to_geometry(region: dict[str, Any]) -> ColumnElement[Any]:
    """SQL expression encoding a canonical GeoJSON geometry into the region column.

    The column is two-dimensional, so any altitude is dropped on the way in.
    """
    geometry = geo_func.ST_Force2D(geo_func.ST_GeomFromGeoJSON(json.dumps(region)))
    return geo_func.ST_SetSRID(geometry, SRID)


def details_to_values(details: InstanceDetails, *, skip_null: bool) -> dict[str, Any]:
    """Column values for the mergeable fields of ``details``.

    With ``skip_null`` the null fields are left out, so an UPDATE keeps the
    stored value for them.
    """
    values: dict[str, Any] = {}
    for attr, column in MERGEABLE_COLUMNS.items():
        value = getattr(details, attr)
        if value is None:
            if skip_null:
                continue
        elif attr == "region":
            value = region_to_geometry(value)
        values[column] = value
    return values


def row_to_instance(row: Mapping[str, Any]) -> Instance:
    """Convert a row selected with ``region_geojson`` into an Instance."""
    region_geojson = row.get("region_geojson")
    return Instance(
        id=row["id"],
        name=row["name"],
        link=row["link"],
        websocket_link=row["websocket_link"],
        region=json.loads(region_geojson) if region_geojson else None,
        image_url=row.get("image_url"),
        user_count=row.get("user_count") or 0,
        status=InstanceStatus(row["status"]),
        last_fetched_at=row.get("last_fetched_at"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


def row_to_ranked_instance(row: Mapping[str, Any]) -> RankedInstance:
    instance = row_to_instance(row)
    distance = row.get("distance_meters")
    return RankedInstance(
        **instance.model_dump(),
        distance_meters=float(distance) if distance is not None else None,
    )
