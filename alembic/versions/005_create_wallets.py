"""005: create wallets table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # balance may go negative after a cash-shortfall PLATFORM_FEE debit
    op.execute("""
        CREATE TABLE wallets (
            owner_type      VARCHAR(16)  NOT NULL,
            owner_id        VARCHAR(64)  NOT NULL,
            balance         BIGINT       NOT NULL DEFAULT 0,
            total_earnings  BIGINT       NOT NULL DEFAULT 0,
            version         BIGINT       NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            PRIMARY KEY (owner_type, owner_id),
            CONSTRAINT ck_wallets_owner_type CHECK (owner_type IN ('PROVIDER', 'SHOP'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_wallets_updated_at
            BEFORE UPDATE ON wallets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE wallets IS 'Materialized wallet balance per owner, centavos';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
