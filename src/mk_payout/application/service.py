"""PayoutService - wallet balance -> external transfer request.

The PAYOUT debit is posted when the request is made, so the requested amount
cannot be spent twice. REJECTED and FAILED post an offsetting REFUND credit;
ledger rows are never edited. Every operation is one DB transaction.
Payout operations never take a booking lock.
"""
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.datetime_utils import utc_now
from src.mk_common.enums import PayoutStatus, WalletTransactionType
from src.mk_common.errors import (
    InvalidTransitionError,
    PayoutBelowMinimumError,
    PayoutNotFoundError,
)
from src.mk_common.id_generator import generate_id
from src.mk_common.response import Pagination
from src.mk_fees.domain.repository import ConfigStoreProtocol
from src.mk_fees.infrastructure.config_store import ConfigStore
from src.mk_payout.domain.models import Payout
from src.mk_payout.domain.payout_state import REFUNDING_STATUSES, assert_payout_transition
from src.mk_payout.domain.repository import PayoutRepositoryProtocol
from src.mk_payout.infrastructure.persistence import PayoutRepository
from src.mk_wallet.application.ledger import WalletLedger
from src.mk_wallet.domain.models import WalletOwner

logger = logging.getLogger(__name__)


class PayoutService:
    def __init__(
        self,
        repo: PayoutRepositoryProtocol | None = None,
        ledger: WalletLedger | None = None,
        config_store: ConfigStoreProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: PayoutRepositoryProtocol = repo or PayoutRepository()
        self._ledger = ledger or WalletLedger()
        self._config_store: ConfigStoreProtocol = config_store or ConfigStore()
        self._clock = clock

    async def request_payout(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        amount: int,
        method: str,
        account_info: str,
    ) -> Payout:
        try:
            config = await self._config_store.load(db)
            minimum = max(config.min_payout_amount, config.payout_fee_amount + 1)
            if amount < minimum:
                raise PayoutBelowMinimumError(amount, minimum)

            payout = await self._repo.insert(
                db,
                Payout(
                    id=generate_id(),
                    owner_type=owner.owner_type,
                    owner_id=owner.owner_id,
                    amount=amount,
                    fee=config.payout_fee_amount,
                    net_amount=amount - config.payout_fee_amount,
                    method=method,
                    account_info=account_info,
                    status=PayoutStatus.PENDING.value,
                ),
            )
            # Raises InsufficientBalanceError when amount > balance; nothing is written
            await self._ledger.post(
                db,
                owner,
                WalletTransactionType.PAYOUT,
                -amount,
                payout_id=payout.id,
                payment_method=method,
                description=f"Payout request via {method}",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Payout %s requested: %s amount=%d via %s", payout.id, owner, amount, method)
        return payout

    async def mark_processing(self, db: AsyncSession, payout_id: str, admin_id: str) -> Payout:
        return await self._move(
            db, payout_id, PayoutStatus.PROCESSING, {"processed_by": admin_id}
        )

    async def process_payout(
        self, db: AsyncSession, payout_id: str, admin_id: str, reference_number: str
    ) -> Payout:
        return await self._move(
            db,
            payout_id,
            PayoutStatus.COMPLETED,
            {
                "reference_number": reference_number,
                "processed_at": self._clock(),
                "processed_by": admin_id,
            },
        )

    async def reject_payout(
        self, db: AsyncSession, payout_id: str, admin_id: str, reason: str
    ) -> Payout:
        return await self._move(
            db,
            payout_id,
            PayoutStatus.REJECTED,
            {"failure_reason": reason, "processed_at": self._clock(), "processed_by": admin_id},
        )

    async def fail_payout(
        self, db: AsyncSession, payout_id: str, admin_id: str, reason: str
    ) -> Payout:
        return await self._move(
            db,
            payout_id,
            PayoutStatus.FAILED,
            {"failure_reason": reason, "failed_at": self._clock(), "processed_by": admin_id},
        )

    async def _move(
        self,
        db: AsyncSession,
        payout_id: str,
        target: PayoutStatus,
        fields: dict[str, Any],
    ) -> Payout:
        try:
            payout = await self._repo.get_by_id(db, payout_id)
            if payout is None:
                raise PayoutNotFoundError(payout_id)
            assert_payout_transition(payout.status, target)

            updated = await self._repo.transition(
                db, payout_id, payout.status, target, self._clock(), fields=fields
            )
            if updated is None:
                # Another admin moved it first
                current = await self._repo.get_by_id(db, payout_id)
                raise InvalidTransitionError(
                    "payout", current.status if current else payout.status, target.value
                )

            if target in REFUNDING_STATUSES:
                await self._ledger.post(
                    db,
                    updated.owner,
                    WalletTransactionType.REFUND,
                    updated.amount,
                    payout_id=updated.id,
                    description=f"Payout {target.value.lower()}: {fields.get('failure_reason')}",
                    created_by=fields.get("processed_by"),
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Payout %s -> %s", payout_id, target.value)
        return updated

    async def get_payout_history(
        self, db: AsyncSession, owner: WalletOwner, page: int, limit: int
    ) -> tuple[list[Payout], Pagination]:
        offset = (page - 1) * limit
        items = await self._repo.list_by_owner(db, owner, offset, limit)
        total = await self._repo.count_by_owner(db, owner)
        return items, Pagination.of(page, limit, total)

    async def list_payouts(
        self, db: AsyncSession, status: str | None, page: int, limit: int
    ) -> tuple[list[Payout], Pagination]:
        offset = (page - 1) * limit
        items = await self._repo.list_by_status(db, status, offset, limit)
        total = await self._repo.count_by_status(db, status)
        return items, Pagination.of(page, limit, total)


_service: PayoutService | None = None


def get_payout_service() -> PayoutService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = PayoutService()
    return _service
