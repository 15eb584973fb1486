"""001: create accounts table

Revision ID: 001
Revises:
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE accounts (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         BIGINT          NOT NULL,
            account_name    VARCHAR(100)    NOT NULL,
            account_number  VARCHAR(20)     NOT NULL,
            currency        CHAR(3)         NOT NULL DEFAULT 'USD',
            balance         NUMERIC(20, 2)  NOT NULL DEFAULT 0,
            status          VARCHAR(10)     NOT NULL DEFAULT 'ACTIVE',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_accounts_account_name     UNIQUE (account_name),
            CONSTRAINT uq_accounts_account_number   UNIQUE (account_number),
            CONSTRAINT ck_accounts_balance_gte_0    CHECK (balance >= 0),
            CONSTRAINT ck_accounts_status           CHECK (status IN ('ACTIVE', 'INACTIVE'))
        );
    """)
    op.execute("CREATE INDEX idx_accounts_user_id ON accounts (user_id);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Customer accounts; balance only changes through the ledger engine';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
