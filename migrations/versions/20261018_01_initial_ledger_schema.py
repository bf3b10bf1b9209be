"""initial ledger schema

Revision ID: 5c1e7a90d2b4
Revises: 
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c1e7a90d2b4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_slug", "accounts", ["slug"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_slug", sa.String(length=50), sa.ForeignKey("accounts.slug"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("description", sa.String(length=255)),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.String(length=64), nullable=False),
        sa.Column("created_by_name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("linked_transaction_id", sa.Integer(), sa.ForeignKey("transactions.id")),
        sa.Column("transfer_type", sa.String(length=10)),
        sa.Column("cancelled_transaction_id", sa.Integer(), sa.ForeignKey("transactions.id")),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_by_txn_id", sa.Integer(), sa.ForeignKey("transactions.id")),
    )
    op.create_index("ix_transactions_account_slug", "transactions", ["account_slug"])
    op.create_index("ix_transactions_created_by_id", "transactions", ["created_by_id"])

    op.create_table(
        "flow_sessions",
        sa.Column("chat_id", sa.String(length=64), primary_key=True),
        sa.Column("actor_id", sa.String(length=64), primary_key=True),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("step", sa.String(length=30), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("artifact_ids", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    op.drop_table("flow_sessions")
    op.drop_index("ix_transactions_created_by_id", table_name="transactions")
    op.drop_index("ix_transactions_account_slug", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_accounts_slug", table_name="accounts")
    op.drop_table("accounts")
