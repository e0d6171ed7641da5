"""Integer arithmetic utilities for centavo-denominated money.

All amounts, fees and balances use int (centavos). No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert centavos to display string: 100000 -> '₱1,000.00', -1200 -> '-₱12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-₱{abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"₱{cents // 100:,}.{cents % 100:02d}"


def percent_of(amount: int, percentage: int) -> int:
    """Whole-percent share of an amount, rounded half-up to the centavo.

    (amount * percentage + 50) // 100, e.g. percent_of(12345, 8) == 988.
    """
    if amount == 0 or percentage == 0:
        return 0
    return (amount * percentage + 50) // 100
