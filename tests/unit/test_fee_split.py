"""Unit tests for mk_fees - settlement split and cash fee estimate."""

import dataclasses

import pytest

from src.mk_common.errors import InvalidConfigurationError
from src.mk_fees.domain.split import FeeSplit, estimate_platform_fee, split
from tests.unit.fakes import DEFAULT_CONFIG


class TestSplit:
    def test_independent_provider(self) -> None:
        fees = split(1000, is_shop_affiliated=False, policy=DEFAULT_CONFIG)
        assert fees == FeeSplit(platform_fee=80, provider_earning=920, shop_earning=None)

    def test_shop_affiliated_provider(self) -> None:
        fees = split(1000, is_shop_affiliated=True, policy=DEFAULT_CONFIG)
        assert fees == FeeSplit(platform_fee=80, provider_earning=550, shop_earning=370)

    def test_travel_fee_goes_to_provider(self) -> None:
        fees = split(105000, True, DEFAULT_CONFIG, travel_fee=5000)
        assert fees.platform_fee == 8000
        assert fees.shop_earning == 37000
        assert fees.provider_earning == 60000

    @pytest.mark.parametrize("total", [1, 7, 99, 12345, 99999, 1234567])
    @pytest.mark.parametrize("shop", [True, False])
    def test_parts_sum_to_total(self, total: int, shop: bool) -> None:
        fees = split(total, shop, DEFAULT_CONFIG)
        assert fees.total == total
        assert fees.provider_earning >= 0

    def test_rounding_residual_lands_on_provider(self) -> None:
        # 8% of 12345 = 987.6 -> 988, 37% = 4567.65 -> 4568
        fees = split(12345, True, DEFAULT_CONFIG)
        assert (fees.platform_fee, fees.shop_earning) == (988, 4568)
        assert fees.provider_earning == 12345 - 988 - 4568

    def test_zero_total(self) -> None:
        assert split(0, False, DEFAULT_CONFIG) == FeeSplit(0, 0, None)

    def test_travel_above_total_rejected(self) -> None:
        with pytest.raises(ValueError):
            split(1000, False, DEFAULT_CONFIG, travel_fee=1001)

    def test_invalid_config_blocks_split(self) -> None:
        bad = dataclasses.replace(DEFAULT_CONFIG, shop_fee_percentage=40)
        with pytest.raises(InvalidConfigurationError):
            split(1000, True, bad)


class TestEstimatePlatformFee:
    def test_percentage_of_service_amount(self) -> None:
        assert estimate_platform_fee(100000, DEFAULT_CONFIG) == 8000

    def test_zero_fee_platform(self) -> None:
        free = dataclasses.replace(
            DEFAULT_CONFIG,
            platform_fee_percentage=0,
            shop_fee_percentage=45,
            provider_independent_percentage=100,
        )
        assert estimate_platform_fee(100000, free) == 0
