"""initial oasis schema

Revision ID: 3f1c2a9d7e40
Revises:
Create Date: 2026-10-19 09:12:44.301127

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("water", sa.Float(), nullable=False),
        sa.Column("dates", sa.Float(), nullable=False),
        sa.Column("gold", sa.Float(), nullable=False),
        sa.Column("stone", sa.Float(), nullable=False),
        sa.Column("water_rate", sa.Float(), nullable=False),
        sa.Column("dates_rate", sa.Float(), nullable=False),
        sa.Column("gold_rate", sa.Float(), nullable=False),
        sa.Column("stone_rate", sa.Float(), nullable=False),
        sa.Column("storage_capacity", sa.Integer(), nullable=False),
        sa.Column("map_x", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("map_y", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_resource_update", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "buildings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("profile_id", sa.String(length=64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("building_type", sa.String(length=32), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("slot_index", sa.Integer(), nullable=False),
        sa.Column("is_upgrading", sa.Boolean(), nullable=False),
        sa.Column("upgrade_start_time", sa.DateTime(), nullable=True),
        sa.Column("upgrade_end_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("profile_id", "slot_index", name="uq_buildings_profile_slot"),
    )
    op.create_index("ix_buildings_profile_id", "buildings", ["profile_id"])
    # One builder per profile
    op.create_index(
        "uq_buildings_one_upgrading",
        "buildings",
        ["profile_id"],
        unique=True,
        sqlite_where=sa.text("is_upgrading = 1"),
        postgresql_where=sa.text("is_upgrading"),
    )

    op.create_table(
        "world_map_cells",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("x", sa.Integer(), nullable=False),
        sa.Column("y", sa.Integer(), nullable=False),
        sa.Column("profile_id", sa.String(length=64), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("terrain_type", sa.String(length=24), nullable=False),
        sa.Column("is_occupied", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("x", "y", name="uq_world_map_cells_xy"),
    )
    op.create_index("ix_world_map_cells_profile_id", "world_map_cells", ["profile_id"])


def downgrade() -> None:
    op.drop_index("ix_world_map_cells_profile_id", table_name="world_map_cells")
    op.drop_table("world_map_cells")

    op.drop_index("uq_buildings_one_upgrading", table_name="buildings")
    op.drop_index("ix_buildings_profile_id", table_name="buildings")
    op.drop_table("buildings")

    op.drop_table("profiles")
