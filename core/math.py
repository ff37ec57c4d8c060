"""
Math utilities for FLASHSIM.

Safe Decimal conversions and constant-product AMM helpers (no float money).
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from core.exceptions import PoolError
from core.constants import ErrorCode


def safe_decimal(value: Union[str, int, float, Decimal, None], default: Decimal = Decimal("0")) -> Decimal:
    """
    Safely convert value to Decimal.

    Floats go through str() so that 0.1 becomes Decimal("0.1"),
    not its binary expansion.
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def amm_amount_out(amount_in: Decimal, reserve_in: Decimal, reserve_out: Decimal) -> Decimal:
    """
    Constant-product output for a single swap.

    out = reserve_out * amount_in / (reserve_in + amount_in)

    The product reserve_in * reserve_out is preserved by the swap:
    (reserve_in + amount_in) * (reserve_out - out) == reserve_in * reserve_out.

    Raises:
        PoolError: reserves are not strictly positive
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise PoolError(
            "Reserves must be positive",
            code=ErrorCode.POOL_INVALID_RESERVES,
            details={"reserve_in": str(reserve_in), "reserve_out": str(reserve_out)},
        )
    if amount_in <= 0:
        return Decimal("0")
    return (reserve_out * amount_in) / (reserve_in + amount_in)


def rebalance_to_price(reserve_a: Decimal, reserve_b: Decimal, price: Decimal) -> tuple[Decimal, Decimal]:
    """
    Move reserves to a new price B/A while keeping reserve_a * reserve_b.

    With k = a * b and p = b / a: a = sqrt(k / p), b = sqrt(k * p).
    """
    k = reserve_a * reserve_b
    return (k / price).sqrt(), (k * price).sqrt()
