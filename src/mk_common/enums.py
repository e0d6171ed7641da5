"""Global enums - must match DB CHECK constraints exactly."""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PROVIDER_EN_ROUTE = "PROVIDER_EN_ROUTE"
    PROVIDER_ARRIVED = "PROVIDER_ARRIVED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    GCASH = "GCASH"
    PAYMAYA = "PAYMAYA"


class WalletOwnerType(str, Enum):
    PROVIDER = "PROVIDER"
    SHOP = "SHOP"


class WalletTransactionType(str, Enum):
    # Credits
    TOP_UP = "TOP_UP"
    EARNING = "EARNING"
    REFUND = "REFUND"
    # Debits
    PLATFORM_FEE = "PLATFORM_FEE"
    PAYOUT = "PAYOUT"
    # Explicitly signed
    ADJUSTMENT = "ADJUSTMENT"


class PayoutStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


class PayoutMethod(str, Enum):
    GCASH = "GCASH"
    PAYMAYA = "PAYMAYA"
    BANK_TRANSFER = "BANK_TRANSFER"


class ActorRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    PROVIDER = "PROVIDER"
    SHOP_OWNER = "SHOP_OWNER"
    ADMIN = "ADMIN"
