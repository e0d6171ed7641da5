"""Unit tests for cash-booking admission control."""

import pytest

from src.mk_common.errors import InsufficientWalletBalanceError
from src.mk_risk.rules.cash_admission import (
    assert_cash_admissible,
    check_cash_admission,
    fee_bearing_owner,
)
from src.mk_wallet.domain.models import WalletOwner
from tests.unit.fakes import DEFAULT_CONFIG, FakeSession, InMemoryWalletRepository

SHOP = WalletOwner("SHOP", "shop-1")


async def test_enough_balance() -> None:
    wallets = InMemoryWalletRepository()
    wallets.seed(SHOP, 8000)
    admission = await check_cash_admission(SHOP, 100000, DEFAULT_CONFIG, wallets, FakeSession())
    assert admission.has_enough
    assert admission.required == 8000
    assert admission.shortfall == 0


async def test_shortfall_reported() -> None:
    wallets = InMemoryWalletRepository()
    wallets.seed(SHOP, 3000)
    admission = await check_cash_admission(SHOP, 100000, DEFAULT_CONFIG, wallets, FakeSession())
    assert not admission.has_enough
    assert admission.required_top_up == 5000


async def test_negative_wallet_needs_fee_plus_debt() -> None:
    wallets = InMemoryWalletRepository()
    wallets.seed(SHOP, -2000)
    admission = await check_cash_admission(SHOP, 100000, DEFAULT_CONFIG, wallets, FakeSession())
    assert admission.required_top_up == 10000


async def test_missing_wallet_counts_as_zero() -> None:
    with pytest.raises(InsufficientWalletBalanceError) as exc_info:
        await assert_cash_admissible(
            SHOP, 100000, DEFAULT_CONFIG, InMemoryWalletRepository(), FakeSession()
        )
    assert exc_info.value.available == 0
    assert exc_info.value.required_top_up == 8000


async def test_read_only() -> None:
    wallets = InMemoryWalletRepository()
    wallets.seed(SHOP, 100000)
    await assert_cash_admissible(SHOP, 100000, DEFAULT_CONFIG, wallets, FakeSession())
    assert wallets.transactions == []
    assert wallets.balance(SHOP) == 100000


async def test_non_positive_amount_rejected() -> None:
    with pytest.raises(ValueError):
        await check_cash_admission(
            SHOP, 0, DEFAULT_CONFIG, InMemoryWalletRepository(), FakeSession()
        )


@pytest.mark.parametrize(
    ("shop_id", "expected"),
    [
        (None, WalletOwner("PROVIDER", "prov-1")),
        ("shop-1", WalletOwner("SHOP", "shop-1")),
    ],
)
def test_fee_bearing_owner(shop_id: str | None, expected: WalletOwner) -> None:
    assert fee_bearing_owner("prov-1", shop_id) == expected
