"""WalletLedger - the only writer of wallet balances and wallet_transactions.

Every posting runs inside the caller's DB transaction: booking settlement and
payout workflows post several entries and commit once, so a failure in any
posting rolls back all of them.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import WalletTransactionType
from src.mk_common.errors import InsufficientBalanceError, WalletNotFoundError
from src.mk_common.id_generator import generate_id
from src.mk_wallet.domain.models import WalletOwner, WalletTransaction
from src.mk_wallet.domain.repository import WalletRepositoryProtocol
from src.mk_wallet.domain.rules import validate_posting
from src.mk_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class WalletLedger:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    @property
    def repo(self) -> WalletRepositoryProtocol:
        return self._repo

    async def post(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        tx_type: str,
        signed_amount: int,
        *,
        booking_id: str | None = None,
        payout_id: str | None = None,
        allow_negative: bool = False,
        create_wallet: bool = True,
        payment_method: str | None = None,
        payment_ref: str | None = None,
        description: str | None = None,
        created_by: str | None = None,
    ) -> WalletTransaction:
        validate_posting(tx_type, signed_amount, allow_negative)

        if create_wallet:
            await self._repo.ensure_wallet(db, owner)
        earning = signed_amount if tx_type == WalletTransactionType.EARNING else 0
        wallet = await self._repo.apply_delta(
            db, owner, signed_amount, earning, allow_negative
        )
        if wallet is None:
            current = await self._repo.get_wallet(db, owner)
            if current is None:
                raise WalletNotFoundError(owner.owner_type, owner.owner_id)
            raise InsufficientBalanceError(required=-signed_amount, available=current.balance)

        tx = await self._repo.insert_transaction(
            db,
            WalletTransaction(
                id=generate_id(),
                owner_type=owner.owner_type,
                owner_id=owner.owner_id,
                type=WalletTransactionType(tx_type).value,
                amount=signed_amount,
                balance_before=wallet.balance - signed_amount,
                balance_after=wallet.balance,
                booking_id=booking_id,
                payout_id=payout_id,
                payment_method=payment_method,
                payment_ref=payment_ref,
                description=description,
                created_by=created_by,
            ),
        )
        logger.info(
            "Ledger post %s %s %+d -> %d (booking=%s payout=%s)",
            owner,
            tx.type,
            tx.amount,
            tx.balance_after,
            booking_id,
            payout_id,
        )
        return tx

    async def top_up(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        amount: int,
        method: str,
        ref: str | None = None,
    ) -> WalletTransaction:
        return await self.post(
            db,
            owner,
            WalletTransactionType.TOP_UP,
            amount,
            payment_method=method,
            payment_ref=ref,
            description=f"Wallet top-up via {method}",
        )

    async def adjust(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        signed_amount: int,
        description: str,
        created_by: str,
    ) -> WalletTransaction:
        """Offsetting correction entry; the only way to fix a posted balance."""
        return await self.post(
            db,
            owner,
            WalletTransactionType.ADJUSTMENT,
            signed_amount,
            allow_negative=True,
            create_wallet=False,
            description=description,
            created_by=created_by,
        )
