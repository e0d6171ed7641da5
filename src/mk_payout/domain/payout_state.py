"""Payout state machine.

States:
- PENDING: requested; the PAYOUT debit is already on the ledger
- PROCESSING: an admin has picked it up
- COMPLETED: transfer done, reference number recorded
- REJECTED: admin refused; amount refunded to the wallet
- FAILED: transfer failed; amount refunded to the wallet
"""

from src.mk_common.enums import PayoutStatus
from src.mk_common.errors import InvalidTransitionError

P = PayoutStatus

PAYOUT_TRANSITIONS: dict[str, set[str]] = {
    P.PENDING: {P.PROCESSING, P.COMPLETED, P.REJECTED, P.FAILED},
    P.PROCESSING: {P.COMPLETED, P.REJECTED, P.FAILED},
    P.COMPLETED: set(),
    P.REJECTED: set(),
    P.FAILED: set(),
}

# Outcomes that hand the debited amount back to the wallet
REFUNDING_STATUSES = frozenset({P.REJECTED, P.FAILED})


def assert_payout_transition(current: str, target: str) -> None:
    """Raises InvalidTransitionError if current -> target is not an edge."""
    allowed = PAYOUT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidTransitionError(
            "payout", getattr(current, "value", current), getattr(target, "value", target)
        )
