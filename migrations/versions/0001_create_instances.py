"""create_instances

Create the PostGIS extension and the instances table.

Revision ID: 0001_create_instances
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from geoalchemy2 import Geometry

# revision identifiers, used by Alembic.
revision: str = "0001_create_instances"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # INSTANCES
    op.create_table(
        "instances",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("link", sa.String(1024), nullable=False),
        sa.Column("websocket_link", sa.String(1024), nullable=False),
        sa.Column(
            "region",
            Geometry(geometry_type="GEOMETRY", srid=4326, spatial_index=False),
            nullable=True,
        ),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("user_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(32), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("link", name="uq_instances_link"),
    )
    op.create_index("idx_instances_status", "instances", ["status"])
    op.create_index(
        "idx_instances_region",
        "instances",
        ["region"],
        postgresql_using="gist",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_instances_region", table_name="instances")
    op.drop_index("idx_instances_status", table_name="instances")
    op.drop_table("instances")
