"""
Values -- Amount, percentage and period primitives.

Responsibility:
    Normalizes currency amounts to two fraction digits, derives signed
    percentages with an explicit zero-base guard, and validates
    (year, month) period inputs.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Currency amounts are ``Decimal`` quantized to ``0.01`` (ROUND_HALF_UP).
      NEVER float.
    - Percentages are signed floats; a zero base never divides.

Failure modes:
    - ValidationError for a year outside 1..9999 or a month outside 1..12.
    - ValidationError for an amount that is not a finite decimal.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payroll_kernel.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_amount(value: Decimal | int | str) -> Decimal:
    """Convert to a Decimal currency amount with two fraction digits.

    Floats are rejected: currency values must arrive as Decimal, int or str.
    """
    if isinstance(value, float):
        raise ValidationError("amount", value, "float amounts are not accepted")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError("amount", value, "not a decimal number") from exc
    if not amount.is_finite():
        raise ValidationError("amount", value, "amount must be finite")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_change(
    current: Decimal,
    previous: Decimal,
    places: int = 2,
) -> float | None:
    """Signed percentage change from ``previous`` to ``current``.

    Returns None when ``previous`` is zero; callers decide how to render
    an undefined relative change.
    """
    if previous == 0:
        return None
    pct = (Decimal(current) - Decimal(previous)) / Decimal(previous) * HUNDRED
    return float(round(pct, places))


@dataclass(frozen=True, slots=True)
class PayPeriod:
    """A validated (year, month) pair."""

    year: int
    month: int

    def __post_init__(self) -> None:
        validate_period(self.year, self.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    def previous(self) -> PayPeriod:
        """The calendar month before this one (January -> prior December)."""
        if self.month == 1:
            return PayPeriod(self.year - 1, 12)
        return PayPeriod(self.year, self.month - 1)

    def next(self) -> PayPeriod:
        """The calendar month after this one (December -> next January)."""
        if self.month == 12:
            return PayPeriod(self.year + 1, 1)
        return PayPeriod(self.year, self.month + 1)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month


def validate_period(year: object, month: object) -> None:
    """Reject malformed period inputs, naming the failing field."""
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError("year", year, "year must be an integer")
    if isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError("month", month, "month must be an integer")
    if not 1 <= year <= 9999:
        raise ValidationError("year", year, "year must be within 1..9999")
    if not 1 <= month <= 12:
        raise ValidationError("month", month, "month must be within 1..12")
