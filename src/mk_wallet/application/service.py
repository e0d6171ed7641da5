"""WalletApplicationService - balance, history, top-up, cash admission, fee quote.

top_up and adjust are the only write paths here; both commit or roll back
their own transaction. Everything else is read-only.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_booking.domain.repository import ProviderDirectoryProtocol
from src.mk_booking.infrastructure.directory import ProviderDirectory
from src.mk_common.cents import cents_to_display
from src.mk_common.enums import WalletOwnerType
from src.mk_common.response import Pagination
from src.mk_fees.domain.repository import ConfigStoreProtocol
from src.mk_fees.domain.split import estimate_platform_fee
from src.mk_fees.infrastructure.config_store import ConfigStore
from src.mk_gateway.auth.actor import Actor
from src.mk_risk.rules.cash_admission import check_cash_admission, fee_bearing_owner
from src.mk_wallet.application.ledger import WalletLedger
from src.mk_wallet.application.schemas import (
    CashAdmissionResponse,
    FeeQuoteResponse,
    TopUpResponse,
    TransactionListResponse,
    WalletBalanceResponse,
    WalletTransactionItem,
)
from src.mk_wallet.domain.models import WalletOwner


class WalletApplicationService:
    def __init__(
        self,
        ledger: WalletLedger | None = None,
        config_store: ConfigStoreProtocol | None = None,
        directory: ProviderDirectoryProtocol | None = None,
    ) -> None:
        self._ledger = ledger or WalletLedger()
        self._config_store: ConfigStoreProtocol = config_store or ConfigStore()
        self._directory: ProviderDirectoryProtocol = directory or ProviderDirectory()

    async def get_balance(self, db: AsyncSession, owner: WalletOwner) -> WalletBalanceResponse:
        config = await self._config_store.load(db)
        wallet = await self._ledger.repo.get_wallet(db, owner)
        return WalletBalanceResponse.from_cents(
            owner_type=owner.owner_type,
            owner_id=owner.owner_id,
            balance=wallet.balance if wallet else 0,
            total_earnings=wallet.total_earnings if wallet else 0,
            platform_fee_percentage=config.platform_fee_percentage,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        page: int,
        limit: int,
        tx_type: str | None = None,
    ) -> TransactionListResponse:
        repo = self._ledger.repo
        offset = (page - 1) * limit
        txs = await repo.list_transactions(db, owner, offset, limit, tx_type)
        total = await repo.count_transactions(db, owner, tx_type)
        return TransactionListResponse(
            items=[WalletTransactionItem.from_tx(tx) for tx in txs],
            pagination=Pagination.of(page, limit, total),
        )

    async def top_up(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        amount: int,
        method: str,
        ref: str | None,
    ) -> TopUpResponse:
        try:
            tx = await self._ledger.top_up(db, owner, amount, method, ref)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return TopUpResponse(
            transaction=WalletTransactionItem.from_tx(tx),
            new_balance_cents=tx.balance_after,
            new_balance_display=cents_to_display(tx.balance_after),
        )

    async def adjust(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        signed_amount: int,
        description: str,
        admin_id: str,
    ) -> WalletTransactionItem:
        try:
            tx = await self._ledger.adjust(db, owner, signed_amount, description, admin_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return WalletTransactionItem.from_tx(tx)

    async def cash_fee_wallet(self, db: AsyncSession, actor: Actor) -> WalletOwner:
        """The wallet a cash booking for this actor is charged to.

        A shop-affiliated provider's cash fees land on the shop wallet, so
        admission is checked there rather than on the provider's own wallet.
        """
        owner = actor.wallet_owner()
        if owner.owner_type != WalletOwnerType.PROVIDER:
            return owner
        provider = await self._directory.get_provider(db, owner.owner_id)
        if provider is None:
            return owner
        return fee_bearing_owner(provider.id, provider.shop_id)

    async def check_cash_admission(
        self, db: AsyncSession, actor: Actor, service_amount: int
    ) -> CashAdmissionResponse:
        owner = await self.cash_fee_wallet(db, actor)
        config = await self._config_store.load(db)
        admission = await check_cash_admission(
            owner, service_amount, config, self._ledger.repo, db
        )
        if admission.has_enough:
            message = "Sufficient balance"
        else:
            message = f"Top up at least {cents_to_display(admission.required_top_up)}"
        return CashAdmissionResponse(
            owner_type=owner.owner_type,
            owner_id=owner.owner_id,
            has_enough=admission.has_enough,
            required_cents=admission.required,
            current_cents=admission.current,
            shortfall_cents=admission.shortfall,
            required_top_up_cents=admission.required_top_up,
            message=message,
        )

    async def fee_quote(self, db: AsyncSession, service_amount: int) -> FeeQuoteResponse:
        config = await self._config_store.load(db)
        fee = estimate_platform_fee(service_amount, config)
        return FeeQuoteResponse(
            service_amount_cents=service_amount,
            platform_fee_cents=fee,
            platform_fee_display=cents_to_display(fee),
            platform_fee_percentage=config.platform_fee_percentage,
        )


_service: WalletApplicationService | None = None


def get_wallet_service() -> WalletApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = WalletApplicationService()
    return _service
