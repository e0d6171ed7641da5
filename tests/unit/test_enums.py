"""Tests for mk_common.enums - all enum values must match DB CHECK constraints."""

from src.mk_common.enums import (
    ActorRole,
    BookingStatus,
    PaymentMethod,
    PayoutMethod,
    PayoutStatus,
    WalletOwnerType,
    WalletTransactionType,
)


class TestAllEnumsAreStr:
    def test_booking_status_is_str(self) -> None:
        assert isinstance(BookingStatus.PENDING, str)
        assert BookingStatus.PENDING == "PENDING"

    def test_transaction_type_is_str(self) -> None:
        assert WalletTransactionType.PLATFORM_FEE == "PLATFORM_FEE"


class TestValues:
    def test_booking_status(self) -> None:
        assert {s.value for s in BookingStatus} == {
            "PENDING",
            "ACCEPTED",
            "PROVIDER_EN_ROUTE",
            "PROVIDER_ARRIVED",
            "IN_PROGRESS",
            "COMPLETED",
            "REJECTED",
            "CANCELLED",
        }

    def test_payment_method(self) -> None:
        assert {m.value for m in PaymentMethod} == {"CASH", "CARD", "GCASH", "PAYMAYA"}

    def test_transaction_types(self) -> None:
        assert {t.value for t in WalletTransactionType} == {
            "TOP_UP",
            "EARNING",
            "REFUND",
            "PLATFORM_FEE",
            "PAYOUT",
            "ADJUSTMENT",
        }

    def test_payout(self) -> None:
        assert {s.value for s in PayoutStatus} == {
            "PENDING",
            "PROCESSING",
            "COMPLETED",
            "REJECTED",
            "FAILED",
        }
        assert {m.value for m in PayoutMethod} == {"GCASH", "PAYMAYA", "BANK_TRANSFER"}

    def test_owners_and_roles(self) -> None:
        assert {o.value for o in WalletOwnerType} == {"PROVIDER", "SHOP"}
        assert {r.value for r in ActorRole} == {"CUSTOMER", "PROVIDER", "SHOP_OWNER", "ADMIN"}
