"""Progressive tax-slab evaluation."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from compwise_payroll.calculators.types import ZERO, TaxSlab


class InvalidSlabScheduleError(ValueError):
    """Raised by outer layers when a slab schedule fails validation."""

    def __init__(self, regime: str, problems: list[str]):
        self.regime = regime
        self.problems = problems
        super().__init__(f"Invalid {regime} regime slab schedule: {'; '.join(problems)}")


def compute_slab_tax(taxable_amount: Decimal, slabs: Sequence[TaxSlab]) -> Decimal:
    """Compute tax on ``taxable_amount`` across ascending slabs.

    Each slab taxes the span between the previous boundary and its own
    ``up_to`` (or everything above the previous boundary when unbounded).
    The walk stops at the first slab that contains ``taxable_amount``.

    No rounding is applied. Slabs must be ascending with an unbounded last
    entry; a malformed schedule yields a meaningless figure but never raises.
    """
    tax = ZERO
    previous_boundary = ZERO

    for slab in slabs:
        upper = taxable_amount if slab.is_unbounded else min(taxable_amount, slab.up_to)
        span = upper - previous_boundary
        if span > 0:
            tax += span * slab.rate

        if slab.is_unbounded or taxable_amount <= slab.up_to:
            break
        previous_boundary = slab.up_to

    return tax


def validate_slab_schedule(slabs: Sequence[TaxSlab]) -> list[str]:
    """Validate a slab schedule.

    Returns list of problems (empty if valid).
    """
    problems: list[str] = []

    if not slabs:
        return ["Slab schedule is empty"]

    previous: Decimal | None = None
    for i, slab in enumerate(slabs):
        if slab.rate < 0:
            problems.append(f"Slab {i} has negative rate {slab.rate}")

        is_last = i == len(slabs) - 1
        if slab.is_unbounded:
            if not is_last:
                problems.append(f"Slab {i} is unbounded but is not the last slab")
            continue

        if slab.up_to <= 0:
            problems.append(f"Slab {i} upper bound {slab.up_to} must be positive")
        if previous is not None and slab.up_to <= previous:
            problems.append(
                f"Slab {i} upper bound {slab.up_to} does not exceed previous bound {previous}"
            )
        if is_last:
            problems.append("Last slab must be unbounded")
        previous = slab.up_to

    return problems
