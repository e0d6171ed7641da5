"""Ledger replay audit.

Checks, across the whole store:
  * every wallet balance equals the sum of its signed transaction amounts,
    and total_earnings equals the sum of its EARNING credits
  * every transaction row satisfies balance_after == balance_before + amount
  * every COMPLETED booking's split sums to its total
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_WALLET_COUNT_SQL = text("SELECT COUNT(*) FROM wallets")

_WALLET_REPLAY_SQL = text("""
    SELECT w.owner_type, w.owner_id, w.balance, w.total_earnings,
           COALESCE(SUM(t.amount), 0) AS ledger_sum,
           COALESCE(SUM(t.amount) FILTER (WHERE t.type = 'EARNING'), 0) AS earning_sum
    FROM wallets w
    LEFT JOIN wallet_transactions t
      ON t.owner_type = w.owner_type AND t.owner_id = w.owner_id
    GROUP BY w.owner_type, w.owner_id, w.balance, w.total_earnings
    HAVING w.balance <> COALESCE(SUM(t.amount), 0)
        OR w.total_earnings <> COALESCE(SUM(t.amount) FILTER (WHERE t.type = 'EARNING'), 0)
    LIMIT :limit
""")

_BROKEN_CHAIN_SQL = text("""
    SELECT id, owner_type, owner_id, balance_before, amount, balance_after
    FROM wallet_transactions
    WHERE balance_after <> balance_before + amount
    LIMIT :limit
""")

_BOOKING_SPLIT_SQL = text("""
    SELECT id, booking_number, total_amount, platform_fee, provider_earning, shop_earning
    FROM bookings
    WHERE status = 'COMPLETED'
      AND (platform_fee IS NULL OR provider_earning IS NULL
           OR platform_fee + provider_earning + COALESCE(shop_earning, 0) <> total_amount)
    LIMIT :limit
""")


async def verify_ledger(db: AsyncSession, limit: int = 100) -> dict[str, object]:
    """Returns {"ok", "wallets_checked", "violations"}; read-only."""
    violations: list[str] = []
    wallets_checked = int((await db.execute(_WALLET_COUNT_SQL)).scalar_one())

    for row in (await db.execute(_WALLET_REPLAY_SQL, {"limit": limit})).fetchall():
        if row.balance != row.ledger_sum:
            violations.append(
                f"Wallet {row.owner_type}:{row.owner_id} balance={row.balance} "
                f"!= ledger sum={row.ledger_sum}"
            )
        if row.total_earnings != row.earning_sum:
            violations.append(
                f"Wallet {row.owner_type}:{row.owner_id} total_earnings={row.total_earnings} "
                f"!= earning sum={row.earning_sum}"
            )

    for row in (await db.execute(_BROKEN_CHAIN_SQL, {"limit": limit})).fetchall():
        violations.append(
            f"Transaction {row.id} ({row.owner_type}:{row.owner_id}): "
            f"{row.balance_before} + {row.amount} != {row.balance_after}"
        )

    for row in (await db.execute(_BOOKING_SPLIT_SQL, {"limit": limit})).fetchall():
        violations.append(
            f"Booking {row.booking_number}: platform_fee={row.platform_fee} + "
            f"provider_earning={row.provider_earning} + shop_earning={row.shop_earning} "
            f"!= total={row.total_amount}"
        )

    for msg in violations:
        logger.error("Ledger audit: %s", msg)
    return {"ok": not violations, "wallets_checked": wallets_checked, "violations": violations}
