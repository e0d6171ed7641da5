"""Payout domain model - pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.mk_common.enums import PayoutStatus
from src.mk_wallet.domain.models import WalletOwner


@dataclass
class Payout:
    id: str
    owner_type: str  # WalletOwnerType value
    owner_id: str
    amount: int      # centavos debited from the wallet
    fee: int         # centavos withheld by the transfer
    net_amount: int  # amount - fee, what the owner receives
    method: str      # PayoutMethod value
    account_info: str
    status: str = PayoutStatus.PENDING.value
    reference_number: str | None = None  # COMPLETED only
    failure_reason: str | None = None    # REJECTED / FAILED only
    processed_at: datetime | None = None
    processed_by: str | None = None
    failed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def owner(self) -> WalletOwner:
        return WalletOwner(self.owner_type, self.owner_id)
