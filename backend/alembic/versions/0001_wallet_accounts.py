"""wallet accounts and wallet links

Revision ID: 0001_wallet_accounts
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "0001_wallet_accounts"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("login_identifier", sa.String(), nullable=False),
        sa.Column("internal_uid", sa.String(length=32), nullable=False),
        sa.Column("user_metadata", sa.JSON(), nullable=False),
        sa.Column("credential_hash", sa.String(length=64), nullable=True),
        sa.Column("credential_issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("internal_uid"),
    )
    op.create_index(op.f("ix_accounts_login_identifier"), "accounts", ["login_identifier"], unique=True)

    # unique address is what keeps concurrent first logins from creating two accounts
    op.create_table(
        "wallet_links",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("address", sa.String(length=42), nullable=False),
        sa.Column("account_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("account_id"),
    )
    op.create_index(op.f("ix_wallet_links_address"), "wallet_links", ["address"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_wallet_links_address"), table_name="wallet_links")
    op.drop_table("wallet_links")
    op.drop_index(op.f("ix_accounts_login_identifier"), table_name="accounts")
    op.drop_table("accounts")
