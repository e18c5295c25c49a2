import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from geoalchemy2 import Geography
from geoalchemy2 import functions as geo_func
from sqlalchemy import cast, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from courier_registry.domain.instance.model.aggregate import Instance, RankedInstance
from courier_registry.domain.instance.model.region import SRID
from courier_registry.domain.instance.model.value import (
    GeoPoint,
    InstanceDetails,
    InstanceStatus,
)
from courier_registry.domain.instance.port.repository import InstanceRepository
from courier_registry.domain.shared.error import ConflictError, StorageUnavailableError
from courier_registry.infrastructure.persistence.mappers.instance import (
    details_to_values,
    row_to_instance,
    row_to_ranked_instance,
)
from courier_registry.infrastructure.persistence.tables import instances_table

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

# Untyped geography cast; ST_Distance on geography measures meters on the spheroid.
GEOGRAPHY = Geography(geometry_type=None)

t = instances_table

# Every read decodes the geometry back to GeoJSON text.
INSTANCE_COLUMNS = (
    t.c.id,
    t.c.name,
    t.c.link,
    t.c.websocket_link,
    geo_func.ST_AsGeoJSON(t.c.region).label("region_geojson"),
    t.c.image_url,
    t.c.user_count,
    t.c.status,
    t.c.last_fetched_at,
    t.c.created_at,
    t.c.updated_at,
)


def _is_unique_violation(error: IntegrityError) -> bool:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == UNIQUE_VIOLATION


class PostgresInstanceRepository(InstanceRepository):
    """PostGIS-backed instance store.

    Each mutating method runs in its own transaction and commits before
    returning, so a failed statement never leaves a half-applied change.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert(self, details: InstanceDetails) -> Instance:
        now = datetime.now(UTC)
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "link": details.link,
            **details_to_values(details, skip_null=False),
            "status": InstanceStatus.VERIFIED.value,
            "last_fetched_at": now,
            "created_at": now,
            "updated_at": details.updated_at,
        }
        if values.get("user_count") is None:
            values["user_count"] = 0

        stmt = insert(t).values(**values).returning(*INSTANCE_COLUMNS)
        try:
            result = await self.session.execute(stmt)
            row = result.mappings().one()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_unique_violation(e):
                raise ConflictError("Instance with this link already exists") from e
            raise self._storage_error("insert", e) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._storage_error("insert", e) from e
        return row_to_instance(row)

    async def find_by_link(self, link: str) -> Instance | None:
        stmt = select(*INSTANCE_COLUMNS).where(t.c.link == link).limit(1)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._storage_error("find_by_link", e) from e
        row = result.mappings().first()
        return row_to_instance(row) if row else None

    async def delete_by_link(self, link: str) -> bool:
        stmt = delete(t).where(t.c.link == link).returning(t.c.id)
        try:
            result = await self.session.execute(stmt)
            deleted = result.first() is not None
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._storage_error("delete_by_link", e) from e
        return deleted

    async def merge_update(self, link: str, details: InstanceDetails) -> Instance | None:
        now = datetime.now(UTC)
        values = {
            **details_to_values(details, skip_null=True),
            "last_fetched_at": now,
            "updated_at": details.updated_at or now,
        }
        stmt = update(t).where(t.c.link == link).values(**values).returning(*INSTANCE_COLUMNS)
        try:
            result = await self.session.execute(stmt)
            row = result.mappings().first()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._storage_error("merge_update", e) from e
        return row_to_instance(row) if row else None

    async def list_verified(self, point: GeoPoint) -> list[RankedInstance]:
        reference = geo_func.ST_SetSRID(
            geo_func.ST_MakePoint(point.longitude, point.latitude),
            SRID,
        )
        distance = geo_func.ST_Distance(
            cast(t.c.region, GEOGRAPHY),
            cast(reference, GEOGRAPHY),
        ).label("distance_meters")

        stmt = (
            select(*INSTANCE_COLUMNS, distance)
            .where(t.c.status == InstanceStatus.VERIFIED.value)
            .order_by(distance.asc().nulls_last(), t.c.id)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._storage_error("list_verified", e) from e
        return [row_to_ranked_instance(r) for r in result.mappings().all()]

    @staticmethod
    def _storage_error(operation: str, error: Exception) -> StorageUnavailableError:
        logger.error("Instance store %s failed: %s", operation, error)
        return StorageUnavailableError(f"Instance store {operation} failed")
