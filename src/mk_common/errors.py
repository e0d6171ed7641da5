"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / actor
  2xxx: Wallet ledger
  3xxx: Booking
  4xxx: Payout
  5xxx: Engine configuration
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Common base for unknown booking / payout / wallet owner."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


# --- 1xxx: Auth / actor ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class NotAuthorizedError(AppError):
    def __init__(self, detail: str = "Not authorized for this action") -> None:
        super().__init__(1002, detail, 403)


# --- 2xxx: Wallet ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        self.shortfall = max(required - available, 0)
        super().__init__(
            2001,
            f"Insufficient balance: required {required} centavos, "
            f"available {available} centavos, shortfall {self.shortfall} centavos",
            422,
        )


class InsufficientWalletBalanceError(AppError):
    """Cash admission refused: the wallet cannot cover the uncollected platform fee."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        self.shortfall = max(required - available, 0)
        self.required_top_up = self.shortfall
        super().__init__(
            2002,
            f"Insufficient wallet balance for cash booking: platform fee {required} centavos, "
            f"wallet {available} centavos, top up at least {self.required_top_up} centavos",
            422,
        )


class InvalidLedgerEntryError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid ledger entry: {detail}", 422)


class WalletNotFoundError(NotFoundError):
    def __init__(self, owner_type: str, owner_id: str) -> None:
        super().__init__(2004, f"Wallet not found: {owner_type} {owner_id}")


# --- 3xxx: Booking ---

class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(3001, f"Booking not found: {booking_id}")


class InvalidTransitionError(AppError):
    def __init__(self, entity: str, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            3002, f"Invalid {entity} transition: {current} -> {target}", 409
        )


class ProviderNotFoundError(NotFoundError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(3003, f"Provider not found or not approved: {provider_id}")


class InvalidBookingRequestError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid booking request: {detail}", 422)


class ArrivalNotConfirmedError(AppError):
    def __init__(self, distance_m: float, radius_m: int) -> None:
        super().__init__(
            3005,
            f"Provider is {distance_m:.0f}m from the service address (limit {radius_m}m)",
            422,
        )


# --- 4xxx: Payout ---

class PayoutNotFoundError(NotFoundError):
    def __init__(self, payout_id: str) -> None:
        super().__init__(4001, f"Payout not found: {payout_id}")


class PayoutBelowMinimumError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            4002, f"Payout amount {amount} is below the minimum of {minimum} centavos", 422
        )


# --- 5xxx: Engine configuration ---

class InvalidConfigurationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Invalid engine configuration: {detail}", 500)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
