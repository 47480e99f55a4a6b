"""Fixed-point helpers for currency amounts.

Amounts are persisted as floats (two decimals) but every calculation goes
through ``Decimal`` built from the float's shortest repr, so sums never pick
up binary rounding drift.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def round2(amount) -> Decimal:
    """Round half-up to cents."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return round2(to_decimal(unit_price) * quantity)


def as_amount(amount) -> float:
    """Convert a decimal amount back to the float stored on aggregates."""
    return float(round2(amount))
