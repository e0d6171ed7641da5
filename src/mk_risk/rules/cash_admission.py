"""Cash-booking admission control.

A cash booking pays the provider in hand, so the platform fee is never
collected at payment time; it is debited from the fee-bearing wallet (shop for
shop-affiliated providers, otherwise the provider) at completion. Before such a
booking is created, that wallet must already cover the estimated fee.

Read-only: this rule never posts to the ledger.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import WalletOwnerType
from src.mk_common.errors import InsufficientWalletBalanceError
from src.mk_fees.domain.policy import EngineConfig
from src.mk_fees.domain.split import estimate_platform_fee
from src.mk_wallet.domain.models import WalletOwner
from src.mk_wallet.domain.repository import WalletRepositoryProtocol


def fee_bearing_owner(provider_id: str, shop_id: str | None) -> WalletOwner:
    """Wallet charged the platform fee of a cash booking with this provider."""
    if shop_id:
        return WalletOwner(WalletOwnerType.SHOP.value, shop_id)
    return WalletOwner(WalletOwnerType.PROVIDER.value, provider_id)


@dataclass(frozen=True)
class CashAdmission:
    owner: WalletOwner
    required: int   # estimated platform fee, centavos
    current: int    # wallet balance, centavos

    @property
    def has_enough(self) -> bool:
        return self.current >= self.required

    @property
    def shortfall(self) -> int:
        return max(self.required - self.current, 0)

    @property
    def required_top_up(self) -> int:
        return self.shortfall


async def check_cash_admission(
    owner: WalletOwner,
    service_amount: int,
    policy: EngineConfig,
    wallets: WalletRepositoryProtocol,
    db: AsyncSession,
) -> CashAdmission:
    if service_amount <= 0:
        raise ValueError(f"service_amount must be positive, got {service_amount}")
    wallet = await wallets.get_wallet(db, owner)
    return CashAdmission(
        owner=owner,
        required=estimate_platform_fee(service_amount, policy),
        current=wallet.balance if wallet else 0,
    )


async def assert_cash_admissible(
    owner: WalletOwner,
    service_amount: int,
    policy: EngineConfig,
    wallets: WalletRepositoryProtocol,
    db: AsyncSession,
) -> CashAdmission:
    admission = await check_cash_admission(owner, service_amount, policy, wallets, db)
    if not admission.has_enough:
        raise InsufficientWalletBalanceError(admission.required, admission.current)
    return admission
