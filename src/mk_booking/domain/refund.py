"""Cancellation refund policy."""

from datetime import datetime

from src.mk_common.cents import percent_of
from src.mk_fees.domain.policy import EngineConfig

_SECONDS_PER_HOUR = 3600


def refund_percentage(
    scheduled_at: datetime, cancelled_at: datetime, policy: EngineConfig
) -> int:
    """100 at or beyond the full-refund notice, partial within it, else 0.

    Notice is measured from cancellation time to the scheduled start; a
    cancellation after the start has negative notice and refunds nothing.
    """
    notice_hours = (scheduled_at - cancelled_at).total_seconds() / _SECONDS_PER_HOUR
    if notice_hours >= policy.cancellation_full_refund_hours:
        return 100
    if notice_hours >= policy.cancellation_partial_refund_hours:
        return policy.cancellation_partial_refund_percentage
    return 0


def refund_amount(total_amount: int, percentage: int) -> int:
    return percent_of(total_amount, percentage)
