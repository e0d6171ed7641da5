"""Engine configuration - fee percentages, payout and cancellation policy.

Loaded once per settlement call (ConfigStore.load) and passed explicitly to
every calculation. validate() runs on load and again inside split(), so a
malformed percentage set blocks settlement instead of posting wrong amounts.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

from config.settings import Settings
from src.mk_common.errors import InvalidConfigurationError

# app_config key -> EngineConfig field
CONFIG_KEYS: dict[str, str] = {
    "platform_fee_percentage": "platform_fee_percentage",
    "shop_fee_percentage": "shop_fee_percentage",
    "provider_shop_percentage": "provider_shop_percentage",
    "provider_independent_percentage": "provider_independent_percentage",
    "min_payout_amount": "min_payout_amount",
    "payout_fee_amount": "payout_fee_amount",
    "booking_accept_timeout_seconds": "booking_accept_timeout_seconds",
    "cancellation_full_refund_hours": "cancellation_full_refund_hours",
    "cancellation_partial_refund_hours": "cancellation_partial_refund_hours",
    "cancellation_partial_refund_percentage": "cancellation_partial_refund_percentage",
}


@dataclass(frozen=True)
class EngineConfig:
    platform_fee_percentage: int
    shop_fee_percentage: int
    provider_shop_percentage: int
    provider_independent_percentage: int
    min_payout_amount: int                  # centavos
    payout_fee_amount: int                  # centavos
    booking_accept_timeout_seconds: int
    cancellation_full_refund_hours: int
    cancellation_partial_refund_hours: int
    cancellation_partial_refund_percentage: int

    @classmethod
    def from_settings(cls, s: Settings) -> "EngineConfig":
        return cls(
            platform_fee_percentage=s.PLATFORM_FEE_PERCENTAGE,
            shop_fee_percentage=s.SHOP_FEE_PERCENTAGE,
            provider_shop_percentage=s.PROVIDER_SHOP_PERCENTAGE,
            provider_independent_percentage=s.PROVIDER_INDEPENDENT_PERCENTAGE,
            min_payout_amount=s.MIN_PAYOUT_AMOUNT,
            payout_fee_amount=s.PAYOUT_FEE_AMOUNT,
            booking_accept_timeout_seconds=s.BOOKING_ACCEPT_TIMEOUT_SECONDS,
            cancellation_full_refund_hours=s.CANCELLATION_FULL_REFUND_HOURS,
            cancellation_partial_refund_hours=s.CANCELLATION_PARTIAL_REFUND_HOURS,
            cancellation_partial_refund_percentage=s.CANCELLATION_PARTIAL_REFUND_PERCENTAGE,
        )

    def with_overrides(self, rows: Mapping[str, str]) -> "EngineConfig":
        """Apply app_config key/value rows. Unknown keys are ignored."""
        changes: dict[str, int] = {}
        for key, raw in rows.items():
            field_name = CONFIG_KEYS.get(key)
            if field_name is None:
                continue
            try:
                changes[field_name] = int(str(raw).strip())
            except ValueError:
                raise InvalidConfigurationError(
                    f"{key}={raw!r} is not an integer"
                ) from None
        return replace(self, **changes)

    def validate(self) -> "EngineConfig":
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise InvalidConfigurationError(f"{f.name} must not be negative, got {value}")

        shop_sum = (
            self.platform_fee_percentage
            + self.shop_fee_percentage
            + self.provider_shop_percentage
        )
        if shop_sum != 100:
            raise InvalidConfigurationError(
                f"platform({self.platform_fee_percentage}) + shop({self.shop_fee_percentage}) "
                f"+ provider({self.provider_shop_percentage}) = {shop_sum}, expected 100"
            )
        independent_sum = self.platform_fee_percentage + self.provider_independent_percentage
        if independent_sum != 100:
            raise InvalidConfigurationError(
                f"platform({self.platform_fee_percentage}) + "
                f"provider({self.provider_independent_percentage}) = {independent_sum}, "
                "expected 100"
            )
        if self.cancellation_partial_refund_percentage > 100:
            raise InvalidConfigurationError(
                "cancellation_partial_refund_percentage must be at most 100"
            )
        if self.cancellation_partial_refund_hours > self.cancellation_full_refund_hours:
            raise InvalidConfigurationError(
                "cancellation_partial_refund_hours must not exceed cancellation_full_refund_hours"
            )
        return self
