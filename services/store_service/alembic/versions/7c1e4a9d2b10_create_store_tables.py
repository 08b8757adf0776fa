"""create_store_tables

Revision ID: 7c1e4a9d2b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "7c1e4a9d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

payment_type_enum = postgresql.ENUM(
    "prepaid", "cod", name="store_payment_type_enum", create_type=False
)
payment_status_enum = postgresql.ENUM(
    "pending",
    "success",
    "failed",
    "authorized",
    "refunding",
    "refunded",
    "abandoned",
    name="store_payment_status_enum",
    create_type=False,
)
shipping_status_enum = postgresql.ENUM(
    "pending",
    "processing",
    "ready_to_ship",
    "shipped",
    "delivered",
    "cancelled",
    name="store_shipping_status_enum",
    create_type=False,
)
verification_status_enum = postgresql.ENUM(
    "pending",
    "verified",
    "cancelled",
    name="store_verification_status_enum",
    create_type=False,
)
discount_type_enum = postgresql.ENUM(
    "percentage", "fixed", name="store_discount_type_enum", create_type=False
)
wallet_transaction_type_enum = postgresql.ENUM(
    "credit", "debit", name="store_wallet_transaction_type_enum", create_type=False
)

ALL_ENUMS = (
    payment_type_enum,
    payment_status_enum,
    shipping_status_enum,
    verification_status_enum,
    discount_type_enum,
    wallet_transaction_type_enum,
)


def upgrade() -> None:
    """Upgrade schema - Create store order pipeline tables."""
    bind = op.get_bind()
    for enum in ALL_ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "store_products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("hsn_code", sa.String(20), server_default="6109", nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("is_live", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_store_products"),
    )

    op.create_table(
        "store_product_variants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("stock", sa.Integer(), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "stock >= 0", name="ck_store_product_variants_non_negative_stock"
        ),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["store_products.id"],
            name="fk_store_product_variants_product_id_store_products",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_product_variants"),
        sa.UniqueConstraint("product_id", "size", name="unique_product_size"),
    )

    op.create_table(
        "store_orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_number", sa.String(32), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(20), nullable=False),
        sa.Column("shipping_address", postgresql.JSONB(), nullable=False),
        sa.Column("billing_address", postgresql.JSONB(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("shipping_cost", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("custom_charges", postgresql.JSONB(), nullable=False),
        sa.Column("tax_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax_breakdown", postgresql.JSONB(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("referral_code_used", sa.String(50), nullable=True),
        sa.Column("payment_type", payment_type_enum, nullable=False),
        sa.Column(
            "payment_status",
            payment_status_enum,
            server_default="pending",
            nullable=False,
        ),
        sa.Column("razorpay_order_id", sa.String(100), nullable=True),
        sa.Column("razorpay_payment_id", sa.String(100), nullable=True),
        sa.Column("razorpay_signature", sa.String(255), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "shipping_status",
            shipping_status_enum,
            server_default="pending",
            nullable=False,
        ),
        sa.Column("shiprocket_order_id", sa.String(100), nullable=True),
        sa.Column("shiprocket_shipment_id", sa.String(100), nullable=True),
        sa.Column("courier_name", sa.String(200), nullable=True),
        sa.Column("tracking_number", sa.String(100), nullable=True),
        sa.Column(
            "verification_status",
            verification_status_enum,
            server_default="pending",
            nullable=False,
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "requires_unboxing_video",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column(
            "stock_reconciliation_required",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column("stock_reconciliation_notes", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("abandoned_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "total_amount >= 0", name="ck_store_orders_non_negative_total"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_orders"),
        sa.UniqueConstraint(
            "razorpay_order_id", name="uq_store_orders_razorpay_order_id"
        ),
    )
    op.create_index(
        "ix_store_orders_order_number", "store_orders", ["order_number"], unique=True
    )
    op.create_index("ix_store_orders_customer_email", "store_orders", ["customer_email"])
    op.create_index(
        "ix_store_orders_razorpay_payment_id", "store_orders", ["razorpay_payment_id"]
    )
    op.create_index(
        "ix_store_orders_payment_status_created",
        "store_orders",
        ["payment_status", "created_at"],
    )

    op.create_table(
        "store_order_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.CheckConstraint(
            "quantity > 0", name="ck_store_order_items_positive_quantity"
        ),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["store_orders.id"],
            name="fk_store_order_items_order_id_store_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_order_items"),
    )

    op.create_table(
        "store_config",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("business_name", sa.String(255), server_default="Intru", nullable=False),
        sa.Column("business_email", sa.String(255), nullable=True),
        sa.Column("business_phone", sa.String(20), nullable=True),
        sa.Column("gstin", sa.String(20), nullable=True),
        sa.Column(
            "business_state", sa.String(100), server_default="Karnataka", nullable=False
        ),
        sa.Column("state_code", sa.String(4), server_default="29", nullable=False),
        sa.Column(
            "extra_charges_enabled",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column("custom_charges", postgresql.JSONB(), nullable=False),
        sa.Column(
            "free_shipping_enabled",
            sa.Boolean(),
            server_default=sa.true(),
            nullable=False,
        ),
        sa.Column(
            "default_shipping_cost", sa.Numeric(12, 2), server_default="0", nullable=False
        ),
        sa.Column(
            "is_referral_enabled", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column(
            "referral_discount_type",
            discount_type_enum,
            server_default="percentage",
            nullable=False,
        ),
        sa.Column(
            "referral_discount_value", sa.Numeric(12, 2), server_default="10", nullable=False
        ),
        sa.Column(
            "referral_credit_amount", sa.Numeric(12, 2), server_default="100", nullable=False
        ),
        sa.Column(
            "min_order_for_referral", sa.Numeric(12, 2), server_default="0", nullable=False
        ),
        sa.Column(
            "require_unboxing_video",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column(
            "abandoned_order_timeout_minutes",
            sa.Integer(),
            server_default="15",
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_store_config"),
    )

    op.create_table(
        "store_blocked_pincodes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pincode", sa.String(10), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("blocked_by", sa.String(100), server_default="admin", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_store_blocked_pincodes"),
        sa.UniqueConstraint("pincode", name="uq_store_blocked_pincodes_pincode"),
    )

    op.create_table(
        "store_referral_codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("owner_email", sa.String(255), nullable=False),
        sa.Column("owner_name", sa.String(255), nullable=True),
        sa.Column("uses_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_uses", sa.Integer(), server_default="50", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "uses_count >= 0", name="ck_store_referral_codes_non_negative_uses"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_referral_codes"),
        sa.UniqueConstraint("code", name="uq_store_referral_codes_code"),
    )
    op.create_index(
        "ix_store_referral_codes_owner_email", "store_referral_codes", ["owner_email"]
    )

    op.create_table(
        "store_customer_wallets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("balance", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("total_earned", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("total_spent", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("referral_code", sa.String(50), nullable=False),
        sa.Column(
            "successful_referrals", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_store_customer_wallets"),
        sa.UniqueConstraint(
            "customer_email", name="uq_store_customer_wallets_customer_email"
        ),
        sa.UniqueConstraint(
            "referral_code", name="uq_store_customer_wallets_referral_code"
        ),
    )

    op.create_table(
        "store_wallet_transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("wallet_id", sa.Uuid(), nullable=False),
        sa.Column("transaction_type", wallet_transaction_type_enum, nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("referral_code", sa.String(50), nullable=True),
        sa.Column("idempotency_key", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["wallet_id"],
            ["store_customer_wallets.id"],
            name="fk_store_wallet_transactions_wallet_id_store_customer_wallets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_store_wallet_transactions"),
        sa.UniqueConstraint(
            "idempotency_key", name="uq_store_wallet_transactions_idempotency_key"
        ),
    )


def downgrade() -> None:
    """Downgrade schema - Drop store order pipeline tables."""
    op.drop_table("store_wallet_transactions")
    op.drop_table("store_customer_wallets")
    op.drop_index("ix_store_referral_codes_owner_email", table_name="store_referral_codes")
    op.drop_table("store_referral_codes")
    op.drop_table("store_blocked_pincodes")
    op.drop_table("store_config")
    op.drop_table("store_order_items")
    op.drop_index("ix_store_orders_payment_status_created", table_name="store_orders")
    op.drop_index("ix_store_orders_razorpay_payment_id", table_name="store_orders")
    op.drop_index("ix_store_orders_customer_email", table_name="store_orders")
    op.drop_index("ix_store_orders_order_number", table_name="store_orders")
    op.drop_table("store_orders")
    op.drop_table("store_product_variants")
    op.drop_table("store_products")

    bind = op.get_bind()
    for enum in reversed(ALL_ENUMS):
        enum.drop(bind, checkfirst=True)
