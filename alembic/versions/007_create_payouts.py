"""007: create payouts table

Revision ID: 007
Revises: 006
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payouts (
            id                  VARCHAR(64)   PRIMARY KEY,
            owner_type          VARCHAR(16)   NOT NULL,
            owner_id            VARCHAR(64)   NOT NULL,
            amount              BIGINT        NOT NULL,
            fee                 BIGINT        NOT NULL DEFAULT 0,
            net_amount          BIGINT        NOT NULL,
            method              VARCHAR(20)   NOT NULL,
            account_info        VARCHAR(500)  NOT NULL,
            status              VARCHAR(20)   NOT NULL DEFAULT 'PENDING',
            reference_number    VARCHAR(128),
            failure_reason      VARCHAR(500),
            processed_at        TIMESTAMPTZ,
            processed_by        VARCHAR(64),
            failed_at           TIMESTAMPTZ,
            created_at          TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ   NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_payouts_owner_type CHECK (owner_type IN ('PROVIDER', 'SHOP')),
            CONSTRAINT ck_payouts_method CHECK (method IN ('GCASH', 'PAYMAYA', 'BANK_TRANSFER')),
            CONSTRAINT ck_payouts_status CHECK (
                status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'REJECTED', 'FAILED')
            ),
            CONSTRAINT ck_payouts_amounts CHECK (
                amount > 0 AND fee >= 0 AND net_amount = amount - fee AND net_amount > 0
            ),
            CONSTRAINT ck_payouts_reference CHECK (
                reference_number IS NULL OR status = 'COMPLETED'
            )
        );
    """)
    op.execute("CREATE INDEX idx_payouts_owner ON payouts (owner_type, owner_id, created_at DESC);")
    op.execute("CREATE INDEX idx_payouts_status ON payouts (status, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payouts CASCADE;")
