"""SQLAlchemy table definitions (PostgreSQL + PostGIS)."""

from geoalchemy2 import Geometry
from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    text,
)

from courier_registry.domain.instance.model.region import SRID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# INSTANCES TABLE
# ============================================================================
instances_table = Table(
    "instances",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("link", String(1024), nullable=False),
    Column("websocket_link", String(1024), nullable=False),
    # Generic geometry: Point, Polygon, MultiPolygon or GeometryCollection
    Column(
        "region",
        Geometry(geometry_type="GEOMETRY", srid=SRID, spatial_index=False),
        nullable=True,
    ),
    Column("image_url", String(1024), nullable=True),
    Column("user_count", Integer, nullable=False, server_default=text("0")),
    Column("status", String(32), nullable=False, server_default=text("'pending'")),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    Column("last_fetched_at", DateTime(timezone=True), nullable=True),
    UniqueConstraint("link", name="uq_instances_link"),
)

Index("idx_instances_status", instances_table.c.status)
Index("idx_instances_region", instances_table.c.region, postgresql_using="gist")
