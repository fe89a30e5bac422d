"""Decimal helpers for monetary amounts"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
RATE_STEP = Decimal("0.0001")

# Exclusive magnitude limits of the NUMERIC(14,2) money and NUMERIC(9,4) rate columns
MAX_AMOUNT = Decimal("1e12")
MAX_RATE = Decimal("1e5")

Numeric = Union[Decimal, int, float, str]


def as_decimal(value: Numeric) -> Decimal:
    """Convert to Decimal without rounding (floats go through str to avoid binary noise)"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def bounded_decimal(value: Numeric, limit: Decimal) -> Optional[Decimal]:
    """
    Decimal for a finite value whose magnitude is below ``limit``.

    Returns None for anything else (NaN, Infinity, unparsable input or a
    value too large for its column), so callers can raise their own error kind.
    """
    try:
        number = as_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not number.is_finite() or abs(number) >= limit:
        return None
    return number


def to_money(value: Numeric) -> Decimal:
    """Round to cents, half-up"""
    return as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value: Numeric) -> Decimal:
    """Round an annual percentage rate to the four places it is stored with"""
    return as_decimal(value).quantize(RATE_STEP, rounding=ROUND_HALF_UP)
