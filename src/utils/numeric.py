"""
Decimal helpers shared by the cleaner and the analytics queries.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert ints, floats, strings and Decimals to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Any, places: Decimal = TWO_PLACES) -> Decimal | None:
    """
    Round to 2 decimal places, halves away from zero (SQL ROUND semantics).

    None passes through so that guarded divisions stay None.

    >>> round_half_up(Decimal("2.345"))
    Decimal('2.35')
    """
    if value is None:
        return None
    return to_decimal(value).quantize(places, rounding=ROUND_HALF_UP)


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    """numerator / denominator, or None when the denominator is zero (NULLIF semantics)."""
    if denominator == 0:
        return None
    return numerator / denominator


def mean(values: list[Any]) -> Decimal | None:
    if not values:
        return None
    return sum((to_decimal(v) for v in values), Decimal(0)) / len(values)
