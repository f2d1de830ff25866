"""add products and offers

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("reference", sa.String(length=64), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="EUR"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_products_reference", "products", ["reference"])

    op.create_table(
        "offers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("product_reference", sa.String(length=64), nullable=True),
        sa.Column("customer_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=40), nullable=False),
        sa.Column("is_guest", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("offered_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("comments", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=8), nullable=False, server_default="pending"),
        sa.Column("within_margin", sa.Boolean(), nullable=False),
        sa.Column("max_discount_allowed", sa.Numeric(5, 2), nullable=False),
        sa.Column("coupon_code", sa.String(length=80), nullable=True),
        sa.Column("coupon_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("coupon_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("product_price > 0", name="ck_offers_product_price_positive"),
        sa.CheckConstraint("offered_price > 0 AND offered_price <= product_price", name="ck_offers_offered_price_range"),
    )
    op.create_index("ix_offers_product_id", "offers", ["product_id"])
    op.create_index("ix_offers_customer_id", "offers", ["customer_id"])
    op.create_index("ix_offers_customer_email", "offers", ["customer_email"])
    op.create_index("ix_offers_status", "offers", ["status"])
    op.create_index("ix_offers_coupon_code", "offers", ["coupon_code"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_offers_coupon_code", table_name="offers")
    op.drop_index("ix_offers_status", table_name="offers")
    op.drop_index("ix_offers_customer_email", table_name="offers")
    op.drop_index("ix_offers_customer_id", table_name="offers")
    op.drop_index("ix_offers_product_id", table_name="offers")
    op.drop_table("offers")
    op.drop_index("ix_products_reference", table_name="products")
    op.drop_table("products")
