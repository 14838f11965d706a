"""Initial schema — builds table with shortcode and expiry indexes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "builds",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("shortcode", sa.String(16), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("archetype", sa.String(100), nullable=True),
        sa.Column("primary", sa.String(100), nullable=True),
        sa.Column("secondary", sa.String(100), nullable=True),
        sa.Column("build_data", sa.Text, nullable=True),
        sa.Column("image_data", sa.Text, nullable=True),
        sa.Column("page_data", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_builds_shortcode", "builds", ["shortcode"], unique=True)
    op.create_index("ix_builds_archetype", "builds", ["archetype"])
    op.create_index("ix_builds_primary", "builds", ["primary"])
    op.create_index("ix_builds_secondary", "builds", ["secondary"])
    # The TTL policy creates this index too (IF NOT EXISTS) at startup
    op.create_index("ix_builds_expires_at", "builds", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_builds_expires_at", table_name="builds")
    op.drop_index("ix_builds_secondary", table_name="builds")
    op.drop_index("ix_builds_primary", table_name="builds")
    op.drop_index("ix_builds_archetype", table_name="builds")
    op.drop_index("ix_builds_shortcode", table_name="builds")
    op.drop_table("builds")
