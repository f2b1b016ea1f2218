"""Turn raw user input into finite numbers before it reaches the engine."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from compwise_payroll.calculators.rounding import round_amount

MONTHS_PER_YEAR = Decimal("12")

# Largest magnitude accepted for an amount or day count from outside callers
MAX_AMOUNT = Decimal("1E+15")


class AmountOutOfRangeError(ValueError):
    """Raised when an input amount exceeds ``MAX_AMOUNT`` in magnitude."""

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__(f"amount {amount} exceeds the limit of {MAX_AMOUNT:,.0f}")


def to_decimal(value: Any, fallback: Decimal | int | str = 0) -> Decimal:
    """Convert ``value`` to a finite Decimal.

    Missing, unparsable, NaN and infinite values fall back to ``fallback``.
    Floats go through ``str`` so 0.1 stays 0.1.
    """
    default = Decimal(str(fallback))
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip() if isinstance(value, (str, int, float)) else ""
        if not text:
            return default
        try:
            result = Decimal(text)
        except InvalidOperation:
            return default
    return result if result.is_finite() else default


def check_amount(amount: Decimal) -> Decimal:
    """Return ``amount`` unchanged, or raise AmountOutOfRangeError."""
    if abs(amount) > MAX_AMOUNT:
        raise AmountOutOfRangeError(amount)
    return amount


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return min(max(value, low), high)


def normalize_days(month_days: Any, payment_days: Any) -> tuple[int, int]:
    """Round day counts, force ``month_days >= 1`` and clamp payment days."""
    month = max(1, _round_int(to_decimal(month_days, fallback=30)))
    paid = _round_int(to_decimal(payment_days, fallback=month))
    return month, max(0, min(paid, month))


def monthly_gross_from_annual(annual_gross: Decimal) -> Decimal:
    """Monthly gross for an annual CTC-style input (not rounded)."""
    return annual_gross / MONTHS_PER_YEAR


def _round_int(value: Decimal) -> int:
    return int(round_amount(clamp(value, -MAX_AMOUNT, MAX_AMOUNT)))
