"""Posting rules: which sign each transaction type carries, and who may overdraw."""

from src.mk_common.enums import WalletTransactionType
from src.mk_common.errors import InvalidLedgerEntryError

CREDIT_TYPES = frozenset(
    {WalletTransactionType.TOP_UP, WalletTransactionType.EARNING, WalletTransactionType.REFUND}
)
DEBIT_TYPES = frozenset({WalletTransactionType.PLATFORM_FEE, WalletTransactionType.PAYOUT})
# Only these may drive a balance below zero, and only when the caller asks
OVERDRAFT_TYPES = frozenset(
    {WalletTransactionType.ADJUSTMENT, WalletTransactionType.PLATFORM_FEE}
)


def validate_posting(tx_type: str, signed_amount: int, allow_negative: bool) -> None:
    """Raise InvalidLedgerEntryError if the sign or overdraft flag is wrong for the type."""
    try:
        kind = WalletTransactionType(tx_type)
    except ValueError:
        raise InvalidLedgerEntryError(f"unknown transaction type {tx_type!r}") from None

    if signed_amount == 0:
        raise InvalidLedgerEntryError("amount must not be zero")
    if kind in CREDIT_TYPES and signed_amount < 0:
        raise InvalidLedgerEntryError(f"{kind.value} is a credit, got {signed_amount}")
    if kind in DEBIT_TYPES and signed_amount > 0:
        raise InvalidLedgerEntryError(f"{kind.value} is a debit, got {signed_amount}")
    if allow_negative and kind not in OVERDRAFT_TYPES:
        raise InvalidLedgerEntryError(f"{kind.value} may not overdraw a wallet")
