"""Fee split - platform / shop / provider shares of a completed booking.

Fee base is the service amount (total minus travel fee). Platform fee and shop
earning are percentages of the base; provider earning is the residual, so the
three parts always sum to the total exactly and the travel fee goes to the
provider in full.
"""

from dataclasses import dataclass

from src.mk_common.cents import percent_of
from src.mk_common.errors import InvalidConfigurationError
from src.mk_fees.domain.policy import EngineConfig


@dataclass(frozen=True)
class FeeSplit:
    platform_fee: int
    provider_earning: int
    shop_earning: int | None  # None for independent providers

    @property
    def total(self) -> int:
        return self.platform_fee + self.provider_earning + (self.shop_earning or 0)


def split(
    total_amount: int,
    is_shop_affiliated: bool,
    policy: EngineConfig,
    travel_fee: int = 0,
) -> FeeSplit:
    policy.validate()
    if total_amount < 0 or travel_fee < 0 or travel_fee > total_amount:
        raise ValueError(
            f"Invalid amounts: total={total_amount}, travel_fee={travel_fee}"
        )

    fee_base = total_amount - travel_fee
    platform_fee = percent_of(fee_base, policy.platform_fee_percentage)
    shop_earning = (
        percent_of(fee_base, policy.shop_fee_percentage) if is_shop_affiliated else None
    )
    provider_earning = total_amount - platform_fee - (shop_earning or 0)
    if provider_earning < 0:
        # Only reachable when rounding pushes platform + shop above the base
        raise InvalidConfigurationError(
            f"split of {total_amount} leaves a negative provider earning"
        )
    return FeeSplit(
        platform_fee=platform_fee,
        provider_earning=provider_earning,
        shop_earning=shop_earning,
    )


def estimate_platform_fee(service_amount: int, policy: EngineConfig) -> int:
    """Platform fee a cash booking of this service amount will owe."""
    policy.validate()
    return percent_of(service_amount, policy.platform_fee_percentage)
