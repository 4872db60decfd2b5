"""create equipment table

Revision ID: 8d41b0c6e5f2
Revises: 3c9e1f7a2b40
Create Date: 2026-10-12 10:31:07.480215
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8d41b0c6e5f2"
down_revision: Union[str, Sequence[str], None] = "3c9e1f7a2b40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "equipment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        # UNIQUE constraint
        sa.UniqueConstraint("code", name="uq_equipment_code"),
        # CHECK constraint
        sa.CheckConstraint("stock >= 0", name="ck_equipment_stock_non_negative"),
    )

    op.create_index(op.f("ix_equipment_id"), "equipment", ["id"], unique=False)
    op.create_index("ix_equipment_last_updated", "equipment", ["last_updated"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_equipment_last_updated", table_name="equipment")
    op.drop_index(op.f("ix_equipment_id"), table_name="equipment")
    op.drop_table("equipment")
