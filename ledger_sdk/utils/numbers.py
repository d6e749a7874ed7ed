"""
Numeric coercion for upstream feed values.

Source feeds send amounts as numbers, numeric strings, empty strings or
null. Everything monetary is normalized to Decimal at the boundary.
"""
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
_EPSILON = Decimal("0.01")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convert a loosely-typed feed value to Decimal.

    Args:
        value: int, float, str, Decimal or None
        default: Returned for None, empty strings and non-numeric input

    Returns:
        Decimal value
    """
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        if isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def is_zero(value: Decimal) -> bool:
    """True when the amount is below one cent in magnitude."""
    return abs(value) < _EPSILON
