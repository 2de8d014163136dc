"""Create records table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `records` table shared by the recipes and categories
       collections of the SQL storage backend.
How:   Portable column types only (String, JSON, TIMESTAMP WITH TIME ZONE),
       so the same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (all records are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the records table and its two lookup indexes."""
    op.create_table(
        "records",
        sa.Column("id", sa.String(32), nullable=False, comment="Public record id (hex UUID)"),
        sa.Column(
            "collection",
            sa.String(64),
            nullable=False,
            comment="Owning collection: recipes or categories",
        ),
        sa.Column("name", sa.String(255), nullable=True, comment="Searchable display name"),
        sa.Column("data", sa.JSON(), nullable=False, comment="All other record fields"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Insertion time; orders list pages",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # list(): WHERE collection = ? ORDER BY created_at
    op.create_index(
        "idx_records_collection_created_at",
        "records",
        ["collection", "created_at"],
    )
    # search(): WHERE collection = ? AND name ILIKE ? ORDER BY name
    op.create_index(
        "idx_records_collection_name",
        "records",
        ["collection", "name"],
    )


def downgrade() -> None:
    op.drop_index("idx_records_collection_name", table_name="records")
    op.drop_index("idx_records_collection_created_at", table_name="records")
    op.drop_table("records")
