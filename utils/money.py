"""
Boundary rounding for monetary values.
The engine keeps full Decimal precision; values are rounded to cents only when
they are serialized into an API response.
"""
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round half-up to 2 decimal places."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_out(value: Decimal) -> float:
    """Round to cents and convert to a JSON number."""
    return float(round_money(value))
