"""Currency rounding shared by the engine and the export builders."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

# Whole currency units; every intermediate amount is rounded to this.
UNIT = Decimal("1")


def round_amount(amount: Decimal) -> Decimal:
    """Round to whole currency units, half away from zero.

    ROUND_HALF_UP on a Decimal rounds ties away from zero for negative
    values too, so -2.5 becomes -3. Precision grows with the amount so
    values wider than the default 28 digits still quantize.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 2)
        return amount.quantize(UNIT, rounding=ROUND_HALF_UP)
