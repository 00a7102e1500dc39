"""create kv_entries

Revision ID: 0001_kv_entries
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_kv_entries"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "kv_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("scope", sa.String(length=64), nullable=False),
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("scope", "key", name="uq_kv_entries_scope"),
    )
    op.create_index("ix_kv_entries_scope", "kv_entries", ["scope"])


def downgrade() -> None:
    op.drop_index("ix_kv_entries_scope", table_name="kv_entries")
    op.drop_table("kv_entries")
