"""Unit tests for the booking and payout state machines."""

import pytest

from src.mk_booking.domain.state_machine import (
    BOOKING_TRANSITIONS,
    PROGRESS_STEPS,
    assert_booking_transition,
    assert_customer_cancellable,
    assert_progress_step,
)
from src.mk_common.enums import BookingStatus, PayoutStatus
from src.mk_common.errors import InvalidTransitionError
from src.mk_payout.domain.payout_state import assert_payout_transition

B = BookingStatus
TERMINAL = [B.COMPLETED, B.REJECTED, B.CANCELLED]


class TestBookingTransitions:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (B.PENDING, B.ACCEPTED),
            (B.PENDING, B.REJECTED),
            (B.PENDING, B.CANCELLED),
            (B.ACCEPTED, B.PROVIDER_EN_ROUTE),
            (B.IN_PROGRESS, B.COMPLETED),
            (B.IN_PROGRESS, B.CANCELLED),
        ],
    )
    def test_allowed(self, current: str, target: str) -> None:
        assert_booking_transition(current, target)

    @pytest.mark.parametrize("terminal", TERMINAL)
    @pytest.mark.parametrize("target", list(B))
    def test_terminal_states_are_final(self, terminal: str, target: str) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_booking_transition(terminal, target)

    def test_reject_only_from_pending(self) -> None:
        for status in BOOKING_TRANSITIONS:
            if status == B.PENDING:
                continue
            with pytest.raises(InvalidTransitionError):
                assert_booking_transition(status, B.REJECTED)

    def test_error_names_plain_values(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            assert_booking_transition(B.COMPLETED, B.CANCELLED)
        assert exc_info.value.current == "COMPLETED"
        assert exc_info.value.target == "CANCELLED"


class TestProgressSteps:
    def test_linear_chain(self) -> None:
        chain = [B.ACCEPTED]
        while chain[-1] in PROGRESS_STEPS:
            chain.append(PROGRESS_STEPS[chain[-1]])
        assert chain == [
            B.ACCEPTED,
            B.PROVIDER_EN_ROUTE,
            B.PROVIDER_ARRIVED,
            B.IN_PROGRESS,
            B.COMPLETED,
        ]

    def test_skip_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_progress_step(B.ACCEPTED, B.PROVIDER_ARRIVED)

    def test_backwards_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_progress_step(B.IN_PROGRESS, B.PROVIDER_ARRIVED)

    def test_plain_strings_accepted(self) -> None:
        assert_progress_step("PROVIDER_ARRIVED", "IN_PROGRESS")


class TestCustomerCancellable:
    @pytest.mark.parametrize("status", [B.PENDING, B.ACCEPTED])
    def test_before_departure(self, status: str) -> None:
        assert_customer_cancellable(status)

    @pytest.mark.parametrize(
        "status", [B.PROVIDER_EN_ROUTE, B.PROVIDER_ARRIVED, B.IN_PROGRESS, *TERMINAL]
    )
    def test_after_departure(self, status: str) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_customer_cancellable(status)


class TestPayoutTransitions:
    P = PayoutStatus

    def test_pending_can_complete_directly(self) -> None:
        assert_payout_transition(self.P.PENDING, self.P.COMPLETED)

    def test_processing_can_fail(self) -> None:
        assert_payout_transition(self.P.PROCESSING, self.P.FAILED)

    @pytest.mark.parametrize("terminal", ["COMPLETED", "REJECTED", "FAILED"])
    def test_terminal(self, terminal: str) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_payout_transition(terminal, self.P.PROCESSING)

    def test_no_return_to_pending(self) -> None:
        with pytest.raises(InvalidTransitionError):
            assert_payout_transition(self.P.PROCESSING, self.P.PENDING)
