"""Create season rate tables, availability counters and orders.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

JSONB_TYPE = postgresql.JSONB().with_variant(sa.JSON(), "sqlite")
ORDER_STATUS = sa.Enum("PENDING", "PAID", "CANCELLED", name="orderstatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "season_rate_tables",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("season_start", sa.Date(), nullable=False),
        sa.Column("season_end", sa.Date(), nullable=False),
        sa.Column("weekday_rate", sa.Integer(), nullable=False),
        sa.Column("off_season_rate", sa.Integer(), nullable=True),
        sa.Column("weekend_single_day", sa.Integer(), nullable=False),
        sa.Column("weekend_two_consecutive_days", sa.Integer(), nullable=False),
        sa.Column("weekend_three_day_combo", sa.Integer(), nullable=False),
        sa.Column("add_on_rate_per_day", sa.Integer(), nullable=False),
        sa.Column("max_capacity_per_day", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "season_start <= season_end", name="ck_season_rate_tables_season_bounds"
        ),
        sa.CheckConstraint(
            "weekday_rate >= 0 AND weekend_single_day >= 0"
            " AND weekend_two_consecutive_days >= 0"
            " AND weekend_three_day_combo >= 0 AND add_on_rate_per_day >= 0",
            name="ck_season_rate_tables_non_negative_rates",
        ),
        sa.CheckConstraint(
            "off_season_rate IS NULL OR off_season_rate >= 0",
            name="ck_season_rate_tables_non_negative_off_season_rate",
        ),
        sa.CheckConstraint(
            "max_capacity_per_day >= 1",
            name="ck_season_rate_tables_positive_capacity",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_season_rate_tables"),
    )

    op.create_table(
        "availability_days",
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("hunters_booked", sa.Integer(), nullable=False),
        sa.Column("add_on_booked", sa.Boolean(), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "hunters_booked >= 0",
            name="ck_availability_days_hunters_booked_non_negative",
        ),
        sa.PrimaryKeyConstraint("day", name="pk_availability_days"),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("customer_id", sa.String(length=128), nullable=True),
        sa.Column("customer", JSONB_TYPE, nullable=False),
        sa.Column("dates", JSONB_TYPE, nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("add_on_dates", JSONB_TYPE, nullable=False),
        sa.Column("computed_price", sa.Integer(), nullable=False),
        sa.Column("price_breakdown", JSONB_TYPE, nullable=False),
        sa.Column("rate_table_snapshot", JSONB_TYPE, nullable=False),
        sa.Column("status", ORDER_STATUS, nullable=False),
        sa.Column("payment_reference", sa.String(length=255), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("party_size >= 1", name="ck_orders_party_size_positive"),
        sa.CheckConstraint(
            "computed_price >= 0", name="ck_orders_computed_price_non_negative"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])


def downgrade() -> None:
    op.drop_index("ix_orders_customer_id", table_name="orders")
    op.drop_table("orders")
    op.drop_table("availability_days")
    op.drop_table("season_rate_tables")
    ORDER_STATUS.drop(op.get_bind(), checkfirst=True)
