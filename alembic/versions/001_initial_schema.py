"""Initial schema: items, item_price_history

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- items (owned by the managed backend, read here for SKU bindings) ---
    op.create_table(
        "items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(), nullable=False, comment="Auth user id of the owner"),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("spec", sa.String(), nullable=True),
        sa.Column("quantity", sa.INTEGER(), nullable=False, server_default="1"),
        sa.Column("barcode", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("jd_sku", sa.String(), nullable=True),
        sa.Column("tmall_sku", sa.String(), nullable=True),
        sa.Column("pdd_sku", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_items_owner", "items", ["owner_id"])

    # --- item_price_history (one row per item, platform, day; upserted) ---
    op.create_table(
        "item_price_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "item_id",
            sa.String(36),
            sa.ForeignKey("items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("platform", sa.String(), nullable=False, comment="jd, tmall, pdd"),
        sa.Column("price", sa.DECIMAL(10, 2), nullable=False),
        sa.Column("recorded_at", sa.DATE(), nullable=False),
        sa.UniqueConstraint(
            "item_id",
            "platform",
            "recorded_at",
            name="uq_item_price_history_item_platform_date",
        ),
    )
    op.create_index(
        "ix_item_price_history_item_recorded",
        "item_price_history",
        ["item_id", "recorded_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_item_price_history_item_recorded",
        table_name="item_price_history",
    )
    op.drop_table("item_price_history")
    op.drop_index("ix_items_owner", table_name="items")
    op.drop_table("items")
