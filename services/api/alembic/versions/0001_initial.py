"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("arch_type", sa.String(length=16), nullable=False),
        sa.Column("usage", sa.String(length=16), nullable=False),
        sa.Column("weekly_mileage", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("arch_type IN ('flat','normal','high','unknown')", name="ck_users_arch_type"),
        sa.CheckConstraint("usage IN ('road','trail','treadmill','casual','racing')", name="ck_users_usage"),
        sa.CheckConstraint("weekly_mileage >= 0", name="ck_users_weekly_mileage"),
    )

    op.create_table(
        "scans",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_scans_user_id", "scans", ["user_id"])

    op.create_table(
        "shoes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("brand", sa.String(length=128), nullable=False),
        sa.Column("model", sa.String(length=255), nullable=False),
        sa.Column("terrain", sa.String(length=16), nullable=False),
        sa.Column("stability", sa.String(length=16), nullable=False),
        sa.Column("cushion", sa.String(length=16), nullable=False),
        sa.Column("drop_mm", sa.Integer(), nullable=True),
        sa.Column("weight_g", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("brand", "model", name="uq_shoes_brand_model"),
        sa.CheckConstraint("terrain IN ('road','trail','treadmill','casual','racing','mixed')", name="ck_shoes_terrain"),
        sa.CheckConstraint("stability IN ('neutral','stable','motion_control')", name="ck_shoes_stability"),
        sa.CheckConstraint("cushion IN ('low','medium','high')", name="ck_shoes_cushion"),
    )

    op.create_table(
        "recommendations",
        sa.Column("scan_id", sa.String(length=36), sa.ForeignKey("scans.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("ranked", sa.JSON(), nullable=False),
        sa.Column("avoid", sa.JSON(), nullable=False),
        sa.Column("fallback_needed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("recommendations")
    op.drop_table("shoes")
    op.drop_index("ix_scans_user_id", table_name="scans")
    op.drop_table("scans")
    op.drop_table("users")
