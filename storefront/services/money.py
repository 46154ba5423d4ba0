"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout. Prices enter the
client as numbers or numeric strings (API responses, persisted carts, caller
input); `normalize_price` is the single place they become Decimal.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

from storefront.errors import ValidationError, ERROR_INVALID_PRICE

Number = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Convert via string to avoid float precision issues
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def normalize_price(value: Number) -> Decimal:
    """
    Strictly convert a price to a non-negative Decimal.

    Unlike `to_decimal`, garbage is an error here rather than zero.

    Raises:
        ValidationError: value is missing, non-numeric, not finite or negative
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(ERROR_INVALID_PRICE)

    if isinstance(value, str):
        value = value.strip()

    try:
        if isinstance(value, float):
            price = Decimal(str(value))
        else:
            price = Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(ERROR_INVALID_PRICE)

    if not price.is_finite() or price < 0:
        raise ValidationError(ERROR_INVALID_PRICE)
    return price


def round_money(value: Number) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON payloads.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def format_money(value: Number, symbol: str = "$") -> str:
    """Format a monetary value as e.g. "$1,234.50"."""
    return f"{symbol}{round_money(value):,.2f}"
