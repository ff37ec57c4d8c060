"""
Safe money formatting utilities for FLASHSIM.

No float money: all values are Decimal internally. This module provides
safe formatting for log lines and reports.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

Number = Union[str, Decimal, int, float, None]


def format_money(value: Number, decimals: int = 6) -> str:
    """
    Safely format a money value to string with specified decimal places.

    Handles str, Decimal, int, float (legacy) and None ("0.000000").
    Uses ROUND_HALF_UP (0.005 -> 0.01 with 2 decimals).
    Never raises on valid numeric input.

    Example:
        >>> format_money("123.45")
        '123.450000'
        >>> format_money(None, 2)
        '0.00'
    """
    zero = f"0.{'0' * decimals}" if decimals > 0 else "0"
    if value is None:
        return zero

    try:
        if isinstance(value, str):
            if not value.strip():
                return zero
            dec_value = Decimal(value)
        elif isinstance(value, Decimal):
            dec_value = value
        elif isinstance(value, bool):
            # bool is a subclass of int
            dec_value = Decimal(1 if value else 0)
        else:
            dec_value = Decimal(str(value))

        with localcontext() as ctx:
            ctx.prec = 50
            quantize_str = "0." + "0" * decimals if decimals > 0 else "0"
            rounded = dec_value.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)

        return f"{{:.{decimals}f}}".format(rounded)

    except (InvalidOperation, ValueError, TypeError):
        return zero


def format_usd(value: Number) -> str:
    """
    Format as a signed USD amount with thousands separators.

    Example:
        >>> format_usd(Decimal("1234.5"))
        '$1,234.50'
        >>> format_usd(Decimal("-80"))
        '-$80.00'
    """
    text = format_money(value, 2)
    negative = text.startswith("-")
    amount = Decimal(text.lstrip("-"))
    if negative and amount == 0:
        negative = False
    return f"{'-' if negative else ''}${amount:,.2f}"


def format_pct(value: Number, decimals: int = 1) -> str:
    """
    Format a fraction as a percentage (0.5 -> "50.0%").
    """
    try:
        pct = Decimal(str(value)) * 100 if value is not None else Decimal("0")
    except (InvalidOperation, ValueError):
        pct = Decimal("0")
    return f"{format_money(pct, decimals)}%"
