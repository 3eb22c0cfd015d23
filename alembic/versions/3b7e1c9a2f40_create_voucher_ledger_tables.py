"""Create accounts, venues, vouchers and claim records

Revision ID: 3b7e1c9a2f40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b7e1c9a2f40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.Enum("USER", "OWNER", "ADMIN", name="accountrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_accounts_id"), "accounts", ["id"], unique=False)
    op.create_index(op.f("ix_accounts_email"), "accounts", ["email"], unique=True)

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=200), nullable=False),
        sa.Column("venue_type", sa.Enum("RESTAURANT", "CAFE", "TOURIST_SPOT", name="venuetype"), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_venues_id"), "venues", ["id"], unique=False)
    op.create_index(op.f("ix_venues_owner_id"), "venues", ["owner_id"], unique=False)

    op.create_table(
        "vouchers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("discount_percent", sa.Integer(), nullable=False),
        sa.Column("quantity_total", sa.Integer(), nullable=False),
        sa.Column("quantity_claimed", sa.Integer(), nullable=False),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.Column("valid_until", sa.DateTime(), nullable=False),
        sa.Column("venue_id", sa.Integer(), nullable=False),
        sa.Column("conditions", sa.String(length=300), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("discount_percent BETWEEN 1 AND 100", name="ck_voucher_discount_range"),
        sa.CheckConstraint("quantity_total >= 1", name="ck_voucher_quantity_total"),
        sa.CheckConstraint(
            "quantity_claimed >= 0 AND quantity_claimed <= quantity_total",
            name="ck_voucher_quantity_claimed",
        ),
        sa.CheckConstraint("valid_from < valid_until", name="ck_voucher_validity_window"),
        sa.ForeignKeyConstraint(["venue_id"], ["venues.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vouchers_code"), "vouchers", ["code"], unique=True)
    op.create_index(op.f("ix_vouchers_venue_id"), "vouchers", ["venue_id"], unique=False)
    op.create_index("ix_vouchers_validity", "vouchers", ["valid_from", "valid_until"], unique=False)

    op.create_table(
        "claim_records",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("voucher_id", sa.String(length=36), nullable=True),
        sa.Column("claimed_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("snapshot_code", sa.String(length=20), nullable=False),
        sa.Column("snapshot_discount_percent", sa.Integer(), nullable=False),
        sa.Column("snapshot_venue_name", sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["voucher_id"], ["vouchers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_id", "voucher_id", name="unique_account_voucher_claim"),
    )
    op.create_index(op.f("ix_claim_records_account_id"), "claim_records", ["account_id"], unique=False)
    op.create_index(op.f("ix_claim_records_voucher_id"), "claim_records", ["voucher_id"], unique=False)
    op.create_index(op.f("ix_claim_records_expires_at"), "claim_records", ["expires_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_claim_records_expires_at"), table_name="claim_records")
    op.drop_index(op.f("ix_claim_records_voucher_id"), table_name="claim_records")
    op.drop_index(op.f("ix_claim_records_account_id"), table_name="claim_records")
    op.drop_table("claim_records")

    op.drop_index("ix_vouchers_validity", table_name="vouchers")
    op.drop_index(op.f("ix_vouchers_venue_id"), table_name="vouchers")
    op.drop_index(op.f("ix_vouchers_code"), table_name="vouchers")
    op.drop_table("vouchers")

    op.drop_index(op.f("ix_venues_owner_id"), table_name="venues")
    op.drop_index(op.f("ix_venues_id"), table_name="venues")
    op.drop_table("venues")

    op.drop_index(op.f("ix_accounts_email"), table_name="accounts")
    op.drop_index(op.f("ix_accounts_id"), table_name="accounts")
    op.drop_table("accounts")

    sa.Enum(name="venuetype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="accountrole").drop(op.get_bind(), checkfirst=True)
