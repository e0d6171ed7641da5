"""Snowflake-style IDs for bookings, payouts and ledger rows, plus booking numbers.

IDs are monotonically increasing strings, unique within one process.
Booking numbers are the short, customer-facing form: "MS" + base36 snowflake
+ two random base36 characters. Uniqueness of booking numbers is still
checked against the store at creation (see BookingService.create_booking).
"""

import secrets
import threading
import time

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
BOOKING_NUMBER_PREFIX = "MS"


class SnowflakeIdGenerator:
    """41-bit millisecond timestamp | 10-bit machine id | 12-bit sequence."""

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms < self._last_ms:
                # Clock stepped back: keep issuing from the last timestamp
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self) -> str:
        return str(self.next_int())


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    """Generate a unique snowflake-style string ID."""
    return _default_generator.next_id()


def generate_booking_number() -> str:
    """Short human-readable booking number, e.g. 'MS3F9K2QZ8A1X4'."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(2))
    return f"{BOOKING_NUMBER_PREFIX}{to_base36(_default_generator.next_int())}{suffix}"
