"""008: create app_config table and seed engine defaults

Revision ID: 008
Revises: 007
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE app_config (
            key         VARCHAR(64)   PRIMARY KEY,
            value       VARCHAR(255)  NOT NULL,
            updated_at  TIMESTAMPTZ   NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_app_config_updated_at
            BEFORE UPDATE ON app_config
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    # Percentages are whole numbers; amounts are centavos
    op.execute("""
        INSERT INTO app_config (key, value) VALUES
            ('platform_fee_percentage', '8'),
            ('shop_fee_percentage', '37'),
            ('provider_shop_percentage', '55'),
            ('provider_independent_percentage', '92'),
            ('min_payout_amount', '50000'),
            ('payout_fee_amount', '0'),
            ('booking_accept_timeout_seconds', '30'),
            ('cancellation_full_refund_hours', '24'),
            ('cancellation_partial_refund_hours', '12'),
            ('cancellation_partial_refund_percentage', '70');
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS app_config CASCADE;")
