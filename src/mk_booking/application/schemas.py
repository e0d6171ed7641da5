"""Pydantic schemas for mk_booking API."""
from datetime import datetime

from pydantic import BaseModel, Field

from src.mk_booking.domain.models import Booking
from src.mk_common.cents import cents_to_display
from src.mk_common.enums import BookingStatus, PaymentMethod
from src.mk_common.response import Pagination

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateBookingRequest(BaseModel):
    provider_id: str = Field(..., min_length=1, max_length=64)
    scheduled_at: datetime
    service_amount_cents: int = Field(..., gt=0, description="Service price in centavos")
    travel_fee_cents: int = Field(0, ge=0, description="Travel fee in centavos")
    payment_method: PaymentMethod
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    customer_notes: str | None = Field(None, max_length=500)


class RejectBookingRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class AdvanceStatusRequest(BaseModel):
    status: BookingStatus


class CancelBookingRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class BookingResponse(BaseModel):
    id: str
    booking_number: str
    status: BookingStatus
    customer_id: str
    provider_id: str
    shop_id: str | None
    payment_method: str
    service_amount_cents: int
    travel_fee_cents: int
    total_amount_cents: int
    total_amount_display: str
    platform_fee_cents: int | None
    provider_earning_cents: int | None
    shop_earning_cents: int | None
    scheduled_at: str | None
    accept_deadline: str | None
    created_at: str | None
    accepted_at: str | None
    en_route_at: str | None
    arrived_at: str | None
    started_at: str | None
    completed_at: str | None
    cancelled_at: str | None
    rejected_at: str | None
    cancelled_by: str | None
    cancel_reason: str | None
    rejected_reason: str | None
    refund_percentage: int | None
    refund_amount_cents: int | None
    latitude: float | None
    longitude: float | None
    customer_notes: str | None

    @classmethod
    def from_booking(cls, b: Booking) -> "BookingResponse":
        return cls(
            id=b.id,
            booking_number=b.booking_number,
            status=BookingStatus(b.status),
            customer_id=b.customer_id,
            provider_id=b.provider_id,
            shop_id=b.shop_id,
            payment_method=b.payment_method,
            service_amount_cents=b.service_amount,
            travel_fee_cents=b.travel_fee,
            total_amount_cents=b.total_amount,
            total_amount_display=cents_to_display(b.total_amount),
            platform_fee_cents=b.platform_fee,
            provider_earning_cents=b.provider_earning,
            shop_earning_cents=b.shop_earning,
            scheduled_at=_iso(b.scheduled_at),
            accept_deadline=_iso(b.accept_deadline),
            created_at=_iso(b.created_at),
            accepted_at=_iso(b.accepted_at),
            en_route_at=_iso(b.en_route_at),
            arrived_at=_iso(b.arrived_at),
            started_at=_iso(b.started_at),
            completed_at=_iso(b.completed_at),
            cancelled_at=_iso(b.cancelled_at),
            rejected_at=_iso(b.rejected_at),
            cancelled_by=b.cancelled_by,
            cancel_reason=b.cancel_reason,
            rejected_reason=b.rejected_reason,
            refund_percentage=b.refund_percentage,
            refund_amount_cents=b.refund_amount,
            latitude=b.latitude,
            longitude=b.longitude,
            customer_notes=b.customer_notes,
        )


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    pagination: Pagination
