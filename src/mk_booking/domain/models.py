"""Booking domain model - pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.mk_common.enums import BookingStatus

TERMINAL_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
)


@dataclass
class Booking:
    id: str
    booking_number: str
    customer_id: str
    provider_id: str
    shop_id: str | None  # set iff the provider was shop-affiliated at booking time
    payment_method: str  # PaymentMethod value
    # Money, centavos
    service_amount: int
    travel_fee: int
    total_amount: int
    status: str = BookingStatus.PENDING.value
    # Settlement split: null until COMPLETED, then frozen
    platform_fee: int | None = None
    provider_earning: int | None = None
    shop_earning: int | None = None
    # Lifecycle timestamps, each set once by its own transition
    scheduled_at: datetime | None = None
    accept_deadline: datetime | None = None
    created_at: datetime | None = None
    accepted_at: datetime | None = None
    en_route_at: datetime | None = None
    arrived_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    rejected_at: datetime | None = None
    updated_at: datetime | None = None
    # Cancellation / rejection
    cancelled_by: str | None = None
    cancel_reason: str | None = None
    rejected_reason: str | None = None
    refund_percentage: int | None = None
    refund_amount: int | None = None
    # Service address
    latitude: float | None = None
    longitude: float | None = None
    customer_notes: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_cash(self) -> bool:
        return self.payment_method == "CASH"

    @property
    def is_shop_affiliated(self) -> bool:
        return self.shop_id is not None

    def is_party(self, user_id: str, provider_id: str | None = None) -> bool:
        if user_id == self.customer_id:
            return True
        return provider_id is not None and provider_id == self.provider_id


@dataclass(frozen=True)
class ProviderRef:
    """Directory view of a provider, read at booking time."""

    id: str
    user_id: str
    shop_id: str | None
    status: str

    @property
    def is_approved(self) -> bool:
        return self.status == "APPROVED"
