"""002: create shops and providers reference tables

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
    # Owned by the catalog service; this engine only reads them
    op.execute("""
        CREATE TABLE shops (
            id          VARCHAR(64)  PRIMARY KEY,
            owner_id    VARCHAR(64)  NOT NULL,
            name        VARCHAR(200) NOT NULL,
            status      VARCHAR(20)  NOT NULL DEFAULT 'PENDING',
            created_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_shops_owner_id UNIQUE (owner_id)
        );
    """)
    op.execute("""
        CREATE TABLE providers (
            id          VARCHAR(64)  PRIMARY KEY,
            user_id     VARCHAR(64)  NOT NULL,
            shop_id     VARCHAR(64)  REFERENCES shops (id) ON DELETE SET NULL,
            status      VARCHAR(20)  NOT NULL DEFAULT 'PENDING',
            created_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_providers_user_id UNIQUE (user_id),
            CONSTRAINT ck_providers_status CHECK (
                status IN ('PENDING', 'APPROVED', 'SUSPENDED', 'REJECTED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_providers_shop ON providers (shop_id) WHERE shop_id IS NOT NULL;")
    for table in ("shops", "providers"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS providers CASCADE;")
    op.execute("DROP TABLE IF EXISTS shops CASCADE;")
