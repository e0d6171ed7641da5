"""Pydantic schemas for mk_payout API."""
from pydantic import BaseModel, Field

from src.mk_common.cents import cents_to_display
from src.mk_common.enums import PayoutMethod, PayoutStatus
from src.mk_common.response import Pagination
from src.mk_payout.domain.models import Payout

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PayoutRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Payout amount in centavos")
    method: PayoutMethod
    account_info: str = Field(..., min_length=1, max_length=500)


class ProcessPayoutRequest(BaseModel):
    reference_number: str = Field(..., min_length=1, max_length=128)


class PayoutReasonRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PayoutResponse(BaseModel):
    id: str
    owner_type: str
    owner_id: str
    amount_cents: int
    amount_display: str
    fee_cents: int
    net_amount_cents: int
    net_amount_display: str
    method: str
    account_info: str
    status: PayoutStatus
    reference_number: str | None
    failure_reason: str | None
    processed_at: str | None
    processed_by: str | None
    failed_at: str | None
    created_at: str | None

    @classmethod
    def from_payout(cls, p: Payout) -> "PayoutResponse":
        return cls(
            id=p.id,
            owner_type=p.owner_type,
            owner_id=p.owner_id,
            amount_cents=p.amount,
            amount_display=cents_to_display(p.amount),
            fee_cents=p.fee,
            net_amount_cents=p.net_amount,
            net_amount_display=cents_to_display(p.net_amount),
            method=p.method,
            account_info=p.account_info,
            status=PayoutStatus(p.status),
            reference_number=p.reference_number,
            failure_reason=p.failure_reason,
            processed_at=p.processed_at.isoformat() if p.processed_at else None,
            processed_by=p.processed_by,
            failed_at=p.failed_at.isoformat() if p.failed_at else None,
            created_at=p.created_at.isoformat() if p.created_at else None,
        )


class PayoutListResponse(BaseModel):
    items: list[PayoutResponse]
    pagination: Pagination
