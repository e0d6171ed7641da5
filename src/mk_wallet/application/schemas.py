"""Pydantic schemas for mk_wallet API."""

from pydantic import BaseModel, Field

from src.mk_common.cents import cents_to_display
from src.mk_common.enums import PaymentMethod, WalletTransactionType
from src.mk_common.response import Pagination
from src.mk_wallet.domain.models import WalletTransaction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TopUpRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Top-up amount in centavos")
    payment_method: PaymentMethod
    payment_ref: str | None = Field(None, max_length=128)


class AdjustmentRequest(BaseModel):
    owner_type: str = Field(..., pattern="^(PROVIDER|SHOP)$")
    owner_id: str = Field(..., min_length=1, max_length=64)
    amount_cents: int = Field(..., description="Signed correction in centavos")
    description: str = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WalletBalanceResponse(BaseModel):
    owner_type: str
    owner_id: str
    balance_cents: int
    balance_display: str
    total_earnings_cents: int
    total_earnings_display: str
    platform_fee_percentage: int

    @classmethod
    def from_cents(
        cls,
        owner_type: str,
        owner_id: str,
        balance: int,
        total_earnings: int,
        platform_fee_percentage: int,
    ) -> "WalletBalanceResponse":
        return cls(
            owner_type=owner_type,
            owner_id=owner_id,
            balance_cents=balance,
            balance_display=cents_to_display(balance),
            total_earnings_cents=total_earnings,
            total_earnings_display=cents_to_display(total_earnings),
            platform_fee_percentage=platform_fee_percentage,
        )


class WalletTransactionItem(BaseModel):
    id: str
    type: WalletTransactionType
    amount_cents: int
    amount_display: str
    balance_before_cents: int
    balance_after_cents: int
    balance_after_display: str
    booking_id: str | None
    payout_id: str | None
    payment_method: str | None
    payment_ref: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_tx(cls, tx: WalletTransaction) -> "WalletTransactionItem":
        return cls(
            id=tx.id,
            type=WalletTransactionType(tx.type),
            amount_cents=tx.amount,
            amount_display=cents_to_display(tx.amount),
            balance_before_cents=tx.balance_before,
            balance_after_cents=tx.balance_after,
            balance_after_display=cents_to_display(tx.balance_after),
            booking_id=tx.booking_id,
            payout_id=tx.payout_id,
            payment_method=tx.payment_method,
            payment_ref=tx.payment_ref,
            description=tx.description,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
        )


class TransactionListResponse(BaseModel):
    items: list[WalletTransactionItem]
    pagination: Pagination


class TopUpResponse(BaseModel):
    transaction: WalletTransactionItem
    new_balance_cents: int
    new_balance_display: str


class CashAdmissionResponse(BaseModel):
    owner_type: str
    owner_id: str
    has_enough: bool
    required_cents: int
    current_cents: int
    shortfall_cents: int
    required_top_up_cents: int
    message: str


class FeeQuoteResponse(BaseModel):
    service_amount_cents: int
    platform_fee_cents: int
    platform_fee_display: str
    platform_fee_percentage: int
