"""Unit tests for the ledger replay audit (mocked DB)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from src.mk_admin.application.ledger_audit import verify_ledger


def _result(rows: list | None = None, scalar: int | None = None) -> MagicMock:
    result = MagicMock()
    result.fetchall.return_value = rows or []
    result.scalar_one.return_value = scalar
    return result


def _db(*results: MagicMock) -> AsyncMock:
    db = AsyncMock()
    db.execute.side_effect = list(results)
    return db


async def test_clean_ledger() -> None:
    db = _db(_result(scalar=12), _result(), _result(), _result())
    report = await verify_ledger(db)
    assert report == {"ok": True, "wallets_checked": 12, "violations": []}
    assert db.execute.await_count == 4


async def test_balance_drift_reported() -> None:
    drift = SimpleNamespace(
        owner_type="PROVIDER",
        owner_id="prov-1",
        balance=93000,
        ledger_sum=92000,
        total_earnings=92000,
        earning_sum=92000,
    )
    report = await verify_ledger(_db(_result(scalar=1), _result([drift]), _result(), _result()))
    assert report["ok"] is False
    assert report["violations"] == [
        "Wallet PROVIDER:prov-1 balance=93000 != ledger sum=92000"
    ]


async def test_chain_and_split_violations() -> None:
    broken = SimpleNamespace(
        id="tx-9",
        owner_type="SHOP",
        owner_id="shop-1",
        balance_before=1000,
        amount=-8000,
        balance_after=-6000,
    )
    bad_split = SimpleNamespace(
        booking_number="MS123",
        platform_fee=8000,
        provider_earning=92000,
        shop_earning=None,
        total_amount=105000,
    )
    report = await verify_ledger(
        _db(_result(scalar=2), _result(), _result([broken]), _result([bad_split]))
    )
    assert len(report["violations"]) == 2
    assert "tx-9" in report["violations"][0]
    assert "MS123" in report["violations"][1]
