"""WalletRepository - concrete implementation of WalletRepositoryProtocol.

Balance mutation is a single conditional UPDATE ... RETURNING: the row lock it
takes serializes concurrent postings to the same owner until the caller
commits, and 0 rows means the overdraft condition failed (or the wallet does
not exist). The read-modify-write never happens in Python.

Transaction ownership: the CALLER commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import InternalError
from src.mk_wallet.domain.models import Wallet, WalletOwner, WalletTransaction

_WALLET_COLUMNS = """
    owner_type, owner_id, balance, total_earnings, version, created_at, updated_at
"""

_TX_COLUMNS = """
    id, owner_type, owner_id, type, amount, balance_before, balance_after,
    booking_id, payout_id, payment_method, payment_ref, description,
    created_by, created_at
"""

_ENSURE_WALLET_SQL = text("""
    INSERT INTO wallets (owner_type, owner_id)
    VALUES (:owner_type, :owner_id)
    ON CONFLICT (owner_type, owner_id) DO NOTHING
""")

_GET_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE owner_type = :owner_type AND owner_id = :owner_id
""")

_APPLY_DELTA_SQL = text(f"""
    UPDATE wallets
    SET balance = balance + :delta,
        total_earnings = total_earnings + :earning,
        version = version + 1,
        updated_at = NOW()
    WHERE owner_type = :owner_type
      AND owner_id = :owner_id
      AND (CAST(:allow_negative AS BOOLEAN) OR balance + :delta >= 0)
    RETURNING {_WALLET_COLUMNS}
""")

_INSERT_TX_SQL = text(f"""
    INSERT INTO wallet_transactions
        (id, owner_type, owner_id, type, amount, balance_before, balance_after,
         booking_id, payout_id, payment_method, payment_ref, description, created_by)
    VALUES
        (:id, :owner_type, :owner_id, :type, :amount, :balance_before, :balance_after,
         :booking_id, :payout_id, :payment_method, :payment_ref, :description, :created_by)
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM wallet_transactions
    WHERE owner_type = :owner_type AND owner_id = :owner_id
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = :tx_type)
    ORDER BY created_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

_COUNT_TX_SQL = text("""
    SELECT COUNT(*)
    FROM wallet_transactions
    WHERE owner_type = :owner_type AND owner_id = :owner_id
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = :tx_type)
""")


def _row_to_wallet(row: Any) -> Wallet:
    return Wallet(
        owner_type=row.owner_type,
        owner_id=row.owner_id,
        balance=row.balance,
        total_earnings=row.total_earnings,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_tx(row: Any) -> WalletTransaction:
    return WalletTransaction(
        id=row.id,
        owner_type=row.owner_type,
        owner_id=row.owner_id,
        type=row.type,
        amount=row.amount,
        balance_before=row.balance_before,
        balance_after=row.balance_after,
        booking_id=row.booking_id,
        payout_id=row.payout_id,
        payment_method=row.payment_method,
        payment_ref=row.payment_ref,
        description=row.description,
        created_by=row.created_by,
        created_at=row.created_at,
    )


def _owner_params(owner: WalletOwner) -> dict[str, str]:
    return {"owner_type": owner.owner_type, "owner_id": owner.owner_id}


class WalletRepository:
    async def ensure_wallet(self, db: AsyncSession, owner: WalletOwner) -> None:
        await db.execute(_ENSURE_WALLET_SQL, _owner_params(owner))

    async def get_wallet(self, db: AsyncSession, owner: WalletOwner) -> Wallet | None:
        row = (await db.execute(_GET_WALLET_SQL, _owner_params(owner))).fetchone()
        return _row_to_wallet(row) if row else None

    async def apply_delta(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        delta: int,
        earning: int,
        allow_negative: bool,
    ) -> Wallet | None:
        result = await db.execute(
            _APPLY_DELTA_SQL,
            {
                **_owner_params(owner),
                "delta": delta,
                "earning": earning,
                "allow_negative": allow_negative,
            },
        )
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def insert_transaction(
        self, db: AsyncSession, tx: WalletTransaction
    ) -> WalletTransaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "id": tx.id,
                "owner_type": tx.owner_type,
                "owner_id": tx.owner_id,
                "type": tx.type,
                "amount": tx.amount,
                "balance_before": tx.balance_before,
                "balance_after": tx.balance_after,
                "booking_id": tx.booking_id,
                "payout_id": tx.payout_id,
                "payment_method": tx.payment_method,
                "payment_ref": tx.payment_ref,
                "description": tx.description,
                "created_by": tx.created_by,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet transaction insert returned no rows")
        return _row_to_tx(row)

    async def list_transactions(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        offset: int,
        limit: int,
        tx_type: str | None,
    ) -> list[WalletTransaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {**_owner_params(owner), "tx_type": tx_type, "offset": offset, "limit": limit},
        )
        return [_row_to_tx(row) for row in result.fetchall()]

    async def count_transactions(
        self, db: AsyncSession, owner: WalletOwner, tx_type: str | None
    ) -> int:
        result = await db.execute(
            _COUNT_TX_SQL, {**_owner_params(owner), "tx_type": tx_type}
        )
        return int(result.scalar_one())
