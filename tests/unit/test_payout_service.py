"""Unit tests for PayoutService - debit at request, refund on REJECTED / FAILED."""

import dataclasses

import pytest

from src.mk_common.enums import PayoutStatus
from src.mk_common.errors import (
    InsufficientBalanceError,
    InvalidTransitionError,
    PayoutBelowMinimumError,
    PayoutNotFoundError,
)
from src.mk_payout.application.service import PayoutService
from src.mk_wallet.application.ledger import WalletLedger
from src.mk_wallet.domain.models import WalletOwner
from tests.unit.fakes import (
    DEFAULT_CONFIG,
    T0,
    FakeSession,
    InMemoryPayoutRepository,
    InMemoryWalletRepository,
    MutableClock,
    StaticConfigStore,
)

OWNER = WalletOwner("PROVIDER", "prov-1")


class _Ctx:
    def __init__(self, balance: int = 100000, payout_fee: int = 0) -> None:
        self.db = FakeSession()
        self.wallets = InMemoryWalletRepository()
        self.wallets.seed(OWNER, balance)
        self.payouts = InMemoryPayoutRepository()
        self.clock = MutableClock()
        self.service = PayoutService(
            repo=self.payouts,
            ledger=WalletLedger(self.wallets),
            config_store=StaticConfigStore(
                dataclasses.replace(DEFAULT_CONFIG, payout_fee_amount=payout_fee)
            ),
            clock=self.clock,
        )

    async def request(self, amount: int = 60000):
        return await self.service.request_payout(self.db, OWNER, amount, "GCASH", "09171234567")


@pytest.fixture
def ctx() -> _Ctx:
    return _Ctx()


class TestRequestPayout:
    async def test_debits_wallet_immediately(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        assert payout.status == PayoutStatus.PENDING
        assert (payout.amount, payout.fee, payout.net_amount) == (60000, 0, 60000)
        assert ctx.wallets.balance(OWNER) == 40000
        [tx] = ctx.wallets.rows_for(OWNER)
        assert tx.type == "PAYOUT"
        assert tx.amount == -60000
        assert tx.payout_id == payout.id

    async def test_fee_withheld_from_net(self) -> None:
        ctx = _Ctx(payout_fee=1500)
        payout = await ctx.request(60000)
        assert payout.fee == 1500
        assert payout.net_amount == 58500
        assert ctx.wallets.balance(OWNER) == 40000

    async def test_below_minimum(self, ctx: _Ctx) -> None:
        with pytest.raises(PayoutBelowMinimumError):
            await ctx.request(49999)
        assert ctx.payouts.payouts == {}

    async def test_minimum_covers_fee(self) -> None:
        ctx = _Ctx(balance=200000, payout_fee=80000)
        with pytest.raises(PayoutBelowMinimumError) as exc_info:
            await ctx.request(80000)
        assert "80001" in exc_info.value.message

    async def test_insufficient_balance_writes_nothing(self) -> None:
        ctx = _Ctx(balance=45000)
        with pytest.raises(InsufficientBalanceError):
            await ctx.request(60000)
        assert ctx.payouts.payouts == {}
        assert ctx.wallets.transactions == []
        assert ctx.wallets.balance(OWNER) == 45000
        assert ctx.db.rollbacks == 1


class TestPayoutOutcomes:
    async def test_reject_refunds_full_amount(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        ctx.clock.advance(hours=2)
        rejected = await ctx.service.reject_payout(ctx.db, payout.id, "admin-1", "name mismatch")

        assert rejected.status == PayoutStatus.REJECTED
        assert rejected.failure_reason == "name mismatch"
        assert rejected.processed_by == "admin-1"
        assert rejected.processed_at == T0.replace(hour=11)
        assert ctx.wallets.balance(OWNER) == 100000
        rows = ctx.wallets.rows_for(OWNER)
        assert [(tx.type, tx.amount) for tx in rows] == [("PAYOUT", -60000), ("REFUND", 60000)]

    async def test_fail_after_processing_refunds(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        processing = await ctx.service.mark_processing(ctx.db, payout.id, "admin-1")
        assert processing.status == PayoutStatus.PROCESSING
        assert processing.processed_by == "admin-1"

        failed = await ctx.service.fail_payout(ctx.db, payout.id, "admin-2", "bank timeout")
        assert failed.status == PayoutStatus.FAILED
        assert failed.failed_at == T0
        assert failed.processed_by == "admin-2"
        assert ctx.wallets.balance(OWNER) == 100000

    async def test_complete_posts_nothing(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        done = await ctx.service.process_payout(ctx.db, payout.id, "admin-1", "GC-REF-0001")
        assert done.status == PayoutStatus.COMPLETED
        assert done.reference_number == "GC-REF-0001"
        assert done.processed_at == T0
        assert len(ctx.wallets.rows_for(OWNER)) == 1
        assert ctx.wallets.balance(OWNER) == 40000

    async def test_completed_is_final(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        await ctx.service.process_payout(ctx.db, payout.id, "admin-1", "GC-REF-0001")
        with pytest.raises(InvalidTransitionError):
            await ctx.service.reject_payout(ctx.db, payout.id, "admin-1", "too late")
        assert ctx.wallets.balance(OWNER) == 40000

    async def test_second_reject_does_not_refund_twice(self, ctx: _Ctx) -> None:
        payout = await ctx.request(60000)
        await ctx.service.reject_payout(ctx.db, payout.id, "admin-1", "dup")
        with pytest.raises(InvalidTransitionError):
            await ctx.service.reject_payout(ctx.db, payout.id, "admin-1", "dup")
        assert ctx.wallets.balance(OWNER) == 100000

    async def test_unknown_payout(self, ctx: _Ctx) -> None:
        with pytest.raises(PayoutNotFoundError):
            await ctx.service.mark_processing(ctx.db, "missing", "admin-1")


class TestPayoutQueries:
    async def test_history_and_status_filter(self, ctx: _Ctx) -> None:
        first = await ctx.request(50000)
        second = await ctx.request(50000)
        await ctx.service.reject_payout(ctx.db, first.id, "admin-1", "retry")

        items, page = await ctx.service.get_payout_history(ctx.db, OWNER, 1, 20)
        assert [p.id for p in items] == [second.id, first.id]
        assert page.total == 2

        pending, page = await ctx.service.list_payouts(ctx.db, "PENDING", 1, 20)
        assert [p.id for p in pending] == [second.id]
        assert page.total == 1
