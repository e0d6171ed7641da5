"""Booking state machine.

States:
- PENDING: requested, waiting for the provider to accept
- ACCEPTED: provider accepted within the accept window
- PROVIDER_EN_ROUTE / PROVIDER_ARRIVED / IN_PROGRESS: service progress
- COMPLETED: service done, settled exactly once
- REJECTED: provider declined, or the accept window elapsed
- CANCELLED: customer (PENDING/ACCEPTED) or admin (any non-terminal)
"""

from src.mk_common.enums import BookingStatus
from src.mk_common.errors import InvalidTransitionError

B = BookingStatus

BOOKING_TRANSITIONS: dict[str, set[str]] = {
    B.PENDING: {B.ACCEPTED, B.REJECTED, B.CANCELLED},
    B.ACCEPTED: {B.PROVIDER_EN_ROUTE, B.CANCELLED},
    B.PROVIDER_EN_ROUTE: {B.PROVIDER_ARRIVED, B.CANCELLED},
    B.PROVIDER_ARRIVED: {B.IN_PROGRESS, B.CANCELLED},
    B.IN_PROGRESS: {B.COMPLETED, B.CANCELLED},
    B.COMPLETED: set(),
    B.REJECTED: set(),
    B.CANCELLED: set(),
}

# Provider-driven progress: each status has exactly one successor
PROGRESS_STEPS: dict[str, str] = {
    B.ACCEPTED: B.PROVIDER_EN_ROUTE,
    B.PROVIDER_EN_ROUTE: B.PROVIDER_ARRIVED,
    B.PROVIDER_ARRIVED: B.IN_PROGRESS,
    B.IN_PROGRESS: B.COMPLETED,
}

CUSTOMER_CANCELLABLE = frozenset({B.PENDING, B.ACCEPTED})

# Column stamped by each transition
TIMESTAMP_COLUMNS: dict[str, str] = {
    B.ACCEPTED: "accepted_at",
    B.PROVIDER_EN_ROUTE: "en_route_at",
    B.PROVIDER_ARRIVED: "arrived_at",
    B.IN_PROGRESS: "started_at",
    B.COMPLETED: "completed_at",
    B.REJECTED: "rejected_at",
    B.CANCELLED: "cancelled_at",
}


def _value(status: str) -> str:
    return getattr(status, "value", status)


def assert_booking_transition(current: str, target: str) -> None:
    """Raises InvalidTransitionError if current -> target is not an edge."""
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidTransitionError("booking", _value(current), _value(target))


def assert_progress_step(current: str, target: str) -> None:
    """Provider advance: only the immediate successor is allowed."""
    if PROGRESS_STEPS.get(current) != target:
        raise InvalidTransitionError("booking", _value(current), _value(target))


def assert_customer_cancellable(current: str) -> None:
    if current not in CUSTOMER_CANCELLABLE:
        raise InvalidTransitionError("booking", _value(current), B.CANCELLED.value)
