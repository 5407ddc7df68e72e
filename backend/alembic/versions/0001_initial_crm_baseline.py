"""Initial CRM baseline: staff identities, clients, accounts, transactions."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# Revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    staff_role = sa.Enum("Agent", "Admin", "SuperAdmin", name="staff_role")
    user_status = sa.Enum("Active", "Disabled", name="user_status")
    client_gender = sa.Enum("Male", "Female", "Other", name="client_gender")
    verification_status = sa.Enum("Unverified", "Verified", name="verification_status")
    client_status = sa.Enum("Active", "Deleted", name="client_status")
    account_type = sa.Enum("Savings", "Checking", "Business", name="account_type")
    account_status = sa.Enum("Active", "Inactive", "Deleted", name="account_status")
    transaction_type = sa.Enum("D", "W", name="transaction_type")
    transaction_status = sa.Enum("Completed", "Pending", "Failed", name="transaction_status")

    op.create_table(
        "staff_identities",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("role", staff_role, nullable=False),
        sa.Column("user_status", user_status, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_staff_identities_email", "staff_identities", ["email"], unique=True)

    op.create_table(
        "clients",
        sa.Column("client_id", sa.String(36), primary_key=True),
        sa.Column("agent_id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", client_gender, nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("address", sa.String(100), nullable=False),
        sa.Column("city", sa.String(50), nullable=False),
        sa.Column("state", sa.String(50), nullable=False),
        sa.Column("country", sa.String(50), nullable=False),
        sa.Column("postal_code", sa.String(10), nullable=False),
        sa.Column("verification_status", verification_status, nullable=False),
        sa.Column("client_status", client_status, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_clients_email"),
        sa.UniqueConstraint("phone_number", name="uq_clients_phone_number"),
    )
    op.create_index("ix_clients_agent_id", "clients", ["agent_id"])

    op.create_table(
        "accounts",
        sa.Column("account_id", sa.String(36), primary_key=True),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("agent_id", sa.String(36), nullable=False),
        sa.Column("account_type", account_type, nullable=False),
        sa.Column("account_status", account_status, nullable=False),
        sa.Column("opening_date", sa.Date(), nullable=False),
        sa.Column("initial_deposit", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("branch_id", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_accounts_client_id", "accounts", ["client_id"])
    op.create_index("ix_accounts_agent_id", "accounts", ["agent_id"])

    op.create_table(
        "transactions",
        sa.Column("transaction_id", sa.String(36), primary_key=True),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column(
            "account_id",
            sa.String(36),
            sa.ForeignKey("accounts.account_id", name="fk_transactions_account_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("transaction_type", transaction_type, nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", transaction_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_transactions_account_id", "transactions", ["account_id"])


def downgrade() -> None:
    op.drop_index("ix_transactions_account_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_accounts_agent_id", table_name="accounts")
    op.drop_index("ix_accounts_client_id", table_name="accounts")
    op.drop_table("accounts")
    op.drop_index("ix_clients_agent_id", table_name="clients")
    op.drop_table("clients")
    op.drop_index("ix_staff_identities_email", table_name="staff_identities")
    op.drop_table("staff_identities")

    bind = op.get_bind()
    for name in (
        "transaction_status",
        "transaction_type",
        "account_status",
        "account_type",
        "client_status",
        "verification_status",
        "client_gender",
        "user_status",
        "staff_role",
    ):
        sa.Enum(name=name).drop(bind, checkfirst=True)
