"""
market/mutator.py - Per-tick market mutation.

Each tick every pool:
1. drifts in price by a random factor within ±price_drift, applied as a
   rebalance along its own constant-product curve
2. absorbs an external trade of up to max_volume_fraction of reserve A in
   a random direction, reserve B recomputed so that A * B is unchanged

Congestion is a clamped uniform random walk.

Pure functions: they return new values and never log.
"""

from decimal import Decimal
from random import Random
from typing import Iterable, List

from core.math import clamp, rebalance_to_price, safe_decimal
from core.models import LiquidityPool
from strategy.config import CongestionConfig, MarketConfig

ONE = Decimal("1")
HALF = Decimal("0.5")


def _draw(rng: Random) -> Decimal:
    return safe_decimal(rng.random())


def advance_pool(
    pool: LiquidityPool,
    rng: Random,
    price_drift: Decimal,
    max_volume_fraction: Decimal,
) -> LiquidityPool:
    """Return the pool after one tick of drift and external volume."""
    drift_factor = ONE + (_draw(rng) - HALF) * 2 * price_drift
    reserve_a, reserve_b = rebalance_to_price(
        pool.reserve_a, pool.reserve_b, pool.price * drift_factor
    )

    volume = reserve_a * _draw(rng) * max_volume_fraction
    direction = 1 if rng.random() > 0.5 else -1
    new_reserve_a = reserve_a + volume * direction
    new_reserve_b = (reserve_a * reserve_b) / new_reserve_a

    return pool.with_reserves(new_reserve_a, new_reserve_b)


def advance_pools(
    pools: Iterable[LiquidityPool],
    rng: Random,
    market: MarketConfig,
) -> List[LiquidityPool]:
    """Advance every pool by one tick, preserving order."""
    return [
        advance_pool(pool, rng, market.price_drift, market.max_volume_fraction)
        for pool in pools
    ]


def next_congestion(current: Decimal, rng: Random, config: CongestionConfig) -> Decimal:
    """Random walk step: add U(-step, +step), clamp into [min, max]."""
    delta = (_draw(rng) - HALF) * 2 * config.step
    return clamp(current + delta, config.min, config.max)
