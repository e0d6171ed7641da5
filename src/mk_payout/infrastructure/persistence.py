"""PayoutRepository - raw SQL persistence implementation.

Transaction ownership: the CALLER commits or rolls back.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import InternalError
from src.mk_payout.domain.models import Payout
from src.mk_wallet.domain.models import WalletOwner

_SELECT_COLUMNS = """
    id, owner_type, owner_id, amount, fee, net_amount, method, account_info,
    status, reference_number, failure_reason, processed_at, processed_by,
    failed_at, created_at, updated_at
"""

_INSERT_PAYOUT_SQL = text(f"""
    INSERT INTO payouts (id, owner_type, owner_id, amount, fee, net_amount,
        method, account_info, status)
    VALUES (:id, :owner_type, :owner_id, :amount, :fee, :net_amount,
        :method, :account_info, :status)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_PAYOUT_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM payouts WHERE id = :id
""")

_TRANSITION_SQL = text(f"""
    UPDATE payouts
    SET status = :target,
        reference_number = COALESCE(:reference_number, reference_number),
        failure_reason = COALESCE(:failure_reason, failure_reason),
        processed_at = COALESCE(:processed_at, processed_at),
        processed_by = COALESCE(:processed_by, processed_by),
        failed_at = COALESCE(:failed_at, failed_at),
        updated_at = :now
    WHERE id = :id AND status = :expected
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM payouts
    WHERE owner_type = :owner_type AND owner_id = :owner_id
    ORDER BY created_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

_COUNT_BY_OWNER_SQL = text("""
    SELECT COUNT(*) FROM payouts
    WHERE owner_type = :owner_type AND owner_id = :owner_id
""")

_LIST_BY_STATUS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM payouts
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
    ORDER BY created_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

_COUNT_BY_STATUS_SQL = text("""
    SELECT COUNT(*) FROM payouts
    WHERE (CAST(:status AS TEXT) IS NULL OR status = :status)
""")

_TRANSITION_FIELDS = (
    "reference_number", "failure_reason", "processed_at", "processed_by", "failed_at",
)


def _row_to_payout(row: Any) -> Payout:
    return Payout(
        id=row.id,
        owner_type=row.owner_type,
        owner_id=row.owner_id,
        amount=row.amount,
        fee=row.fee,
        net_amount=row.net_amount,
        method=row.method,
        account_info=row.account_info,
        status=row.status,
        reference_number=row.reference_number,
        failure_reason=row.failure_reason,
        processed_at=row.processed_at,
        processed_by=row.processed_by,
        failed_at=row.failed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class PayoutRepository:
    async def insert(self, db: AsyncSession, payout: Payout) -> Payout:
        result = await db.execute(
            _INSERT_PAYOUT_SQL,
            {
                "id": payout.id,
                "owner_type": payout.owner_type,
                "owner_id": payout.owner_id,
                "amount": payout.amount,
                "fee": payout.fee,
                "net_amount": payout.net_amount,
                "method": payout.method,
                "account_info": payout.account_info,
                "status": payout.status,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Payout insert returned no rows")
        return _row_to_payout(row)

    async def get_by_id(self, db: AsyncSession, payout_id: str) -> Payout | None:
        row = (await db.execute(_GET_PAYOUT_SQL, {"id": payout_id})).fetchone()
        return _row_to_payout(row) if row else None

    async def transition(
        self,
        db: AsyncSession,
        payout_id: str,
        expected: str,
        target: str,
        now: datetime,
        fields: dict[str, Any] | None = None,
    ) -> Payout | None:
        fields = fields or {}
        params: dict[str, Any] = {name: fields.get(name) for name in _TRANSITION_FIELDS}
        params.update(
            {
                "id": payout_id,
                "expected": getattr(expected, "value", expected),
                "target": getattr(target, "value", target),
                "now": now,
            }
        )
        row = (await db.execute(_TRANSITION_SQL, params)).fetchone()
        return _row_to_payout(row) if row else None

    async def list_by_owner(
        self, db: AsyncSession, owner: WalletOwner, offset: int, limit: int
    ) -> list[Payout]:
        result = await db.execute(
            _LIST_BY_OWNER_SQL,
            {
                "owner_type": owner.owner_type,
                "owner_id": owner.owner_id,
                "offset": offset,
                "limit": limit,
            },
        )
        return [_row_to_payout(row) for row in result.fetchall()]

    async def count_by_owner(self, db: AsyncSession, owner: WalletOwner) -> int:
        result = await db.execute(
            _COUNT_BY_OWNER_SQL, {"owner_type": owner.owner_type, "owner_id": owner.owner_id}
        )
        return int(result.scalar_one())

    async def list_by_status(
        self, db: AsyncSession, status: str | None, offset: int, limit: int
    ) -> list[Payout]:
        result = await db.execute(
            _LIST_BY_STATUS_SQL, {"status": status, "offset": offset, "limit": limit}
        )
        return [_row_to_payout(row) for row in result.fetchall()]

    async def count_by_status(self, db: AsyncSession, status: str | None) -> int:
        result = await db.execute(_COUNT_BY_STATUS_SQL, {"status": status})
        return int(result.scalar_one())
