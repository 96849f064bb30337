"""create categories, stocks, orders

Revision ID: 3f1a9c2b7d10
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("slug", sa.String(128), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sizes", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "stocks",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sizes", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_stocks_category", "stocks", ["category"])
    op.create_index("ix_stocks_created", "stocks", ["created_at"])

    op.create_table(
        "orders",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(64), nullable=False),
        sa.Column("address", sa.Text(), nullable=False, server_default=""),
        sa.Column("payment", sa.String(32), nullable=False, server_default="cash"),
        sa.Column("category", sa.String(128)),
        sa.Column("item_id", sa.String(32), nullable=False),
        sa.Column("item_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("size", sa.String(32), nullable=False),
        sa.Column("qty", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(64), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.CheckConstraint("qty > 0", name="ck_order_qty_pos"),
    )
    op.create_index("ix_orders_item_id", "orders", ["item_id"])
    op.create_index("ix_orders_created", "orders", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_orders_created", table_name="orders")
    op.drop_index("ix_orders_item_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_stocks_created", table_name="stocks")
    op.drop_index("ix_stocks_category", table_name="stocks")
    op.drop_table("stocks")
    op.drop_table("categories")
