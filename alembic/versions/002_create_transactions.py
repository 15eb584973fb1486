"""002: create transactions table (append-only log)

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id                  BIGSERIAL       PRIMARY KEY,
            amount              NUMERIC(20, 2)  NOT NULL,
            transaction_type    VARCHAR(20)     NOT NULL,
            transaction_status  VARCHAR(20)     NOT NULL DEFAULT 'COMPLETED',
            description         VARCHAR(255),
            from_account_id     BIGINT          REFERENCES accounts (id) ON DELETE SET NULL,
            to_account_id       BIGINT          REFERENCES accounts (id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_amount_positive CHECK (amount > 0),
            CONSTRAINT ck_transactions_type
                CHECK (transaction_type IN ('DEPOSIT', 'WITHDRAWAL', 'TRANSFER')),
            CONSTRAINT ck_transactions_status
                CHECK (transaction_status IN ('COMPLETED', 'FAILED')),
            CONSTRAINT ck_transactions_distinct_legs
                CHECK (from_account_id IS NULL OR from_account_id <> to_account_id)
        );
    """)
    op.execute("""
        CREATE INDEX idx_transactions_from_account
            ON transactions (from_account_id, created_at DESC);
    """)
    op.execute("""
        CREATE INDEX idx_transactions_to_account
            ON transactions (to_account_id, created_at DESC);
    """)
    op.execute("COMMENT ON TABLE transactions IS 'Immutable ledger log; never updated, never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
