"""004: create booking_visibility table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE booking_visibility (
            booking_id  VARCHAR(64)  NOT NULL REFERENCES bookings (id),
            user_id     VARCHAR(64)  NOT NULL,
            hidden_at   TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            PRIMARY KEY (booking_id, user_id)
        );
    """)
    op.execute("CREATE INDEX idx_booking_visibility_user ON booking_visibility (user_id);")
    op.execute("COMMENT ON TABLE booking_visibility IS 'Per-viewer hide-from-history flags';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS booking_visibility CASCADE;")
