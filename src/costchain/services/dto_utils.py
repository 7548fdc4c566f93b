"""DTO utilities for service layer.

Provides standardized conversion and formatting functions for cost values,
ensuring consistent Decimal handling and display formatting.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from costchain.utils.constants import COST_QUANTUM, DISPLAY_QUANTUM

Number = Union[Decimal, float, int, str, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. None becomes zero.

    Raises:
        ValueError: If the value is not numeric

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a numeric value: {value!r}")


def quantize_cost(value: Number) -> Decimal:
    """
    Round a cost to the stored precision (4 decimal places, half up).

    Examples:
        >>> quantize_cost(Decimal("1.23456"))
        Decimal('1.2346')
    """
    return to_decimal(value).quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)


def cost_to_string(value: Number) -> str:
    """
    Convert a cost value to a 2-decimal string format.

    Examples:
        >>> cost_to_string(Decimal("12.345"))
        '12.35'
        >>> cost_to_string(None)
        '0.00'
    """
    if value is None:
        return "0.00"
    rounded = to_decimal(value).quantize(DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)
    return str(rounded)
