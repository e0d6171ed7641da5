"""Tests for mk_common.errors and mk_common.response."""

from src.mk_common.errors import (
    AppError,
    ArrivalNotConfirmedError,
    BookingNotFoundError,
    InsufficientBalanceError,
    InsufficientWalletBalanceError,
    InvalidTransitionError,
    NotAuthorizedError,
    PayoutBelowMinimumError,
)
from src.mk_common.response import ApiResponse, Pagination, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=60000, available=45000)
        assert err.code == 2001
        assert err.http_status == 422
        assert err.shortfall == 15000
        assert "60000" in err.message

    def test_insufficient_wallet_balance_carries_top_up(self) -> None:
        err = InsufficientWalletBalanceError(required=8000, available=3000)
        assert err.code == 2002
        assert err.required_top_up == 5000
        assert err.shortfall == 5000

    def test_shortfall_never_negative(self) -> None:
        assert InsufficientBalanceError(required=100, available=500).shortfall == 0

    def test_booking_not_found(self) -> None:
        err = BookingNotFoundError("bk-1")
        assert err.code == 3001
        assert err.http_status == 404

    def test_invalid_transition(self) -> None:
        err = InvalidTransitionError("booking", "COMPLETED", "CANCELLED")
        assert err.code == 3002
        assert err.http_status == 409
        assert "COMPLETED -> CANCELLED" in err.message

    def test_arrival_not_confirmed(self) -> None:
        err = ArrivalNotConfirmedError(1234.4, 300)
        assert "1234m" in err.message
        assert err.http_status == 422

    def test_not_authorized(self) -> None:
        assert NotAuthorizedError().http_status == 403

    def test_payout_below_minimum(self) -> None:
        err = PayoutBelowMinimumError(1000, 50000)
        assert err.code == 4002
        assert "50000" in err.message


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "bk-1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "bk-1"}
        assert resp.request_id.startswith("req_")

    def test_error_response_with_data(self) -> None:
        resp = error_response(2002, "short", {"required_top_up": 5000})
        assert resp.code == 2002
        assert resp.data == {"required_top_up": 5000}

    def test_serializable(self) -> None:
        dumped = ApiResponse(data=[1, 2]).model_dump()
        assert set(dumped) == {"code", "message", "data", "timestamp", "request_id"}


class TestPagination:
    def test_total_pages_rounds_up(self) -> None:
        assert Pagination.of(1, 20, 41).total_pages == 3

    def test_empty(self) -> None:
        assert Pagination.of(1, 20, 0).total_pages == 0
