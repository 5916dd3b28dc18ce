"""Decimal helpers for currency amounts"""

from decimal import Decimal, ROUND_DOWN, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Coerce a numeric input to Decimal; floats go through str() to avoid binary noise"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Not a monetary amount: {value!r}") from e


def minor_unit(precision: int) -> Decimal:
    """Smallest representable step for a currency, e.g. 0.01 for precision 2"""
    return Decimal(1).scaleb(-precision)


def truncate(amount: Decimal, precision: int) -> Decimal:
    """Round toward zero to `precision` decimal places"""
    return amount.quantize(minor_unit(precision), rounding=ROUND_DOWN)


def fits_precision(amount: Decimal, precision: int) -> bool:
    """True when the amount has no digits below the currency's minor unit"""
    return amount == truncate(amount, precision)
