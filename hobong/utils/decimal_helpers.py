# hobong/utils/decimal_helpers.py

"""Exact percentage/ratio arithmetic with floor truncation."""

from decimal import Decimal, ROUND_FLOOR
from typing import Union

Number = Union[int, float, str, Decimal]

ONE = Decimal("1")
HUNDRED = Decimal("100")


def _to_decimal(value: Number) -> Decimal:
    # str() first so 33.3 stays 33.3 instead of its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def floor_ratio(days: int, numerator: Number, denominator: Number) -> int:
    """``floor(days * numerator / denominator)`` without float drift."""
    product = Decimal(int(days)) * _to_decimal(numerator) / _to_decimal(denominator)
    return int(product.to_integral_value(rounding=ROUND_FLOOR))


def floor_percent(days: int, percent: Number) -> int:
    """Apply a 0-100 percentage to a day count, truncating fractional days."""
    return floor_ratio(days, percent, HUNDRED)
