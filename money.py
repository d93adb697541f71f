"""
Money helpers

All amounts inside the service are integer cents. These helpers are the
only place where cents meet decimal dollars, and they are used at the
HTTP boundary only.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def dollars_to_cents(amount: Union[str, int, float, Decimal]) -> int:
    # str() first so a float like 19.99 is read as written, not as its binary value
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Invalid dollar amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid dollar amount: {amount!r}")
    return round_half_up(value * 100)


def format_cents(cents: int) -> str:
    """
    Format integer cents as a fixed two-decimal string.
    Example: 123456 -> "1234.56", -5 -> "-0.05"
    """
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d}"
