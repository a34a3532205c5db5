"""seed reference shoes

Revision ID: 0002_seed_shoes
Revises: 0001_initial
Create Date: 2026-10-18 00:00:01
"""

import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0002_seed_shoes"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SEED_SHOES = [
    ("Nike", "Pegasus 40", "road", "neutral", "medium", 10, 285),
    ("Brooks", "Ghost 15", "road", "neutral", "medium", 12, 286),
    ("Hoka", "Clifton 9", "road", "neutral", "high", 5, 248),
    ("Brooks", "Cascadia 17", "trail", "stable", "medium", 8, 300),
]


def upgrade() -> None:
    shoes = sa.table(
        "shoes",
        sa.column("id", sa.String),
        sa.column("brand", sa.String),
        sa.column("model", sa.String),
        sa.column("terrain", sa.String),
        sa.column("stability", sa.String),
        sa.column("cushion", sa.String),
        sa.column("drop_mm", sa.Integer),
        sa.column("weight_g", sa.Integer),
    )
    op.bulk_insert(
        shoes,
        [
            {
                "id": str(uuid.uuid4()),
                "brand": brand,
                "model": model,
                "terrain": terrain,
                "stability": stability,
                "cushion": cushion,
                "drop_mm": drop_mm,
                "weight_g": weight_g,
            }
            for brand, model, terrain, stability, cushion, drop_mm, weight_g in SEED_SHOES
        ],
    )


def downgrade() -> None:
    bind = op.get_bind()
    for brand, model, *_ in SEED_SHOES:
        bind.execute(
            sa.text("DELETE FROM shoes WHERE brand = :brand AND model = :model"),
            {"brand": brand, "model": model},
        )
