"""Unit tests for the cancellation refund policy."""

from datetime import timedelta

import pytest

from src.mk_booking.domain.refund import refund_amount, refund_percentage
from tests.unit.fakes import DEFAULT_CONFIG, T0


@pytest.mark.parametrize(
    ("notice", "expected"),
    [
        (timedelta(hours=25), 100),
        (timedelta(hours=24), 100),
        (timedelta(hours=23, minutes=59), 70),
        (timedelta(hours=18), 70),
        (timedelta(hours=12), 70),
        (timedelta(hours=11, minutes=59), 0),
        (timedelta(hours=6), 0),
        (timedelta(hours=-1), 0),
    ],
)
def test_refund_percentage_by_notice(notice: timedelta, expected: int) -> None:
    assert refund_percentage(T0 + notice, T0, DEFAULT_CONFIG) == expected


def test_refund_amount() -> None:
    assert refund_amount(100000, 100) == 100000
    assert refund_amount(100000, 70) == 70000
    assert refund_amount(100000, 0) == 0
    # 70% of 12345 = 8641.5 -> 8642
    assert refund_amount(12345, 70) == 8642
