"""006: create wallet_transactions table

Revision ID: 006
Revises: 005
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallet_transactions (
            id              VARCHAR(64)   PRIMARY KEY,
            owner_type      VARCHAR(16)   NOT NULL,
            owner_id        VARCHAR(64)   NOT NULL,
            type            VARCHAR(20)   NOT NULL,
            amount          BIGINT        NOT NULL,
            balance_before  BIGINT        NOT NULL,
            balance_after   BIGINT        NOT NULL,
            booking_id      VARCHAR(64),
            payout_id       VARCHAR(64),
            payment_method  VARCHAR(20),
            payment_ref     VARCHAR(128),
            description     VARCHAR(500),
            created_by      VARCHAR(64),
            created_at      TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            FOREIGN KEY (owner_type, owner_id) REFERENCES wallets (owner_type, owner_id),
            CONSTRAINT ck_wallet_tx_type CHECK (
                type IN ('TOP_UP', 'EARNING', 'REFUND', 'PLATFORM_FEE', 'PAYOUT', 'ADJUSTMENT')
            ),
            CONSTRAINT ck_wallet_tx_sign CHECK (
                (type IN ('TOP_UP', 'EARNING', 'REFUND') AND amount > 0)
                OR (type IN ('PLATFORM_FEE', 'PAYOUT') AND amount < 0)
                OR (type = 'ADJUSTMENT' AND amount <> 0)
            ),
            CONSTRAINT ck_wallet_tx_chain CHECK (balance_after = balance_before + amount)
        );
    """)
    op.execute("""
        CREATE INDEX idx_wallet_tx_owner_time
        ON wallet_transactions (owner_type, owner_id, created_at DESC, id DESC);
    """)
    op.execute("""
        CREATE INDEX idx_wallet_tx_booking
        ON wallet_transactions (booking_id)
        WHERE booking_id IS NOT NULL;
    """)
    op.execute("""
        CREATE INDEX idx_wallet_tx_payout
        ON wallet_transactions (payout_id)
        WHERE payout_id IS NOT NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_wallet_tx_append_only
            BEFORE UPDATE OR DELETE ON wallet_transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE wallet_transactions IS 'Wallet ledger - append-only, signed centavos';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wallet_transactions CASCADE;")
