"""003: create bookings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bookings (
            id                  VARCHAR(64)     PRIMARY KEY,
            booking_number      VARCHAR(32)     NOT NULL,
            customer_id         VARCHAR(64)     NOT NULL,
            provider_id         VARCHAR(64)     NOT NULL REFERENCES providers (id),
            shop_id             VARCHAR(64)     REFERENCES shops (id),
            payment_method      VARCHAR(20)     NOT NULL,
            service_amount      BIGINT          NOT NULL,
            travel_fee          BIGINT          NOT NULL DEFAULT 0,
            total_amount        BIGINT          NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            platform_fee        BIGINT,
            provider_earning    BIGINT,
            shop_earning        BIGINT,
            scheduled_at        TIMESTAMPTZ     NOT NULL,
            accept_deadline     TIMESTAMPTZ     NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            accepted_at         TIMESTAMPTZ,
            en_route_at         TIMESTAMPTZ,
            arrived_at          TIMESTAMPTZ,
            started_at          TIMESTAMPTZ,
            completed_at        TIMESTAMPTZ,
            cancelled_at        TIMESTAMPTZ,
            rejected_at         TIMESTAMPTZ,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            cancelled_by        VARCHAR(64),
            cancel_reason       VARCHAR(500),
            rejected_reason     VARCHAR(500),
            refund_percentage   INT,
            refund_amount       BIGINT,
            latitude            DOUBLE PRECISION,
            longitude           DOUBLE PRECISION,
            customer_notes      VARCHAR(500),
            CONSTRAINT uq_bookings_number UNIQUE (booking_number),
            CONSTRAINT ck_bookings_status CHECK (
                status IN ('PENDING', 'ACCEPTED', 'PROVIDER_EN_ROUTE', 'PROVIDER_ARRIVED',
                           'IN_PROGRESS', 'COMPLETED', 'REJECTED', 'CANCELLED')
            ),
            CONSTRAINT ck_bookings_payment_method CHECK (
                payment_method IN ('CASH', 'CARD', 'GCASH', 'PAYMAYA')
            ),
            CONSTRAINT ck_bookings_amounts CHECK (
                service_amount > 0 AND travel_fee >= 0
                AND total_amount = service_amount + travel_fee
            ),
            CONSTRAINT ck_bookings_split_sum CHECK (
                status <> 'COMPLETED'
                OR platform_fee + provider_earning + COALESCE(shop_earning, 0) = total_amount
            ),
            CONSTRAINT ck_bookings_refund_pct CHECK (
                refund_percentage IS NULL OR refund_percentage BETWEEN 0 AND 100
            )
        );
    """)
    op.execute("CREATE INDEX idx_bookings_customer ON bookings (customer_id, created_at DESC);")
    op.execute("CREATE INDEX idx_bookings_provider ON bookings (provider_id, created_at DESC);")
    op.execute("CREATE INDEX idx_bookings_shop ON bookings (shop_id, created_at DESC) WHERE shop_id IS NOT NULL;")
    op.execute("""
        CREATE INDEX idx_bookings_pending_deadline
        ON bookings (accept_deadline)
        WHERE status = 'PENDING';
    """)
    op.execute("COMMENT ON TABLE bookings IS 'Booking lifecycle; never deleted. Money in centavos';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bookings CASCADE;")
