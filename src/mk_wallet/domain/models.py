"""Domain models for mk_wallet - pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WalletOwner:
    owner_type: str  # WalletOwnerType value
    owner_id: str

    def __str__(self) -> str:
        return f"{self.owner_type}:{self.owner_id}"


@dataclass
class Wallet:
    owner_type: str
    owner_id: str
    balance: int          # centavos, may be negative after a cash-shortfall fee
    total_earnings: int   # centavos, running sum of EARNING credits
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def owner(self) -> WalletOwner:
        return WalletOwner(self.owner_type, self.owner_id)


@dataclass
class WalletTransaction:
    id: str
    owner_type: str
    owner_id: str
    type: str             # WalletTransactionType value
    amount: int           # centavos, signed: positive=credit negative=debit
    balance_before: int
    balance_after: int
    booking_id: str | None = None
    payout_id: str | None = None
    payment_method: str | None = None
    payment_ref: str | None = None
    description: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
