"""
strategy/scanner.py - Opportunity scanner.

Finds the best spatial (2-pool) and best triangular (3-pool) route on the
current pool set and returns whichever nets more.

PRICING CONTRACT:
=================
Every leg uses constant-product output:
    out = reserve_out * amount_in / (reserve_in + amount_in)

Spatial (WETH/USDC only):
    buy pool  = lowest price,  USDC in  -> WETH out
    sell pool = highest price, WETH in  -> USDC out
    gross = proceeds - loan

Triangular (best-priced pool per pair):
    WETH -> USDC (WETH/USDC) -> DAI (USDC/DAI) -> WETH (DAI/WETH)
    gross = (weth_out - weth_in) * eth_price

net = gross - gas_fee - loan_fee
gas_fee = gas_base + gas_congestion * congestion
loan_fee = loan_value_usd * loan_fee_rate

A route that cannot be formed (too few pools, same pool both sides) is
disqualified: it is not an error and is not logged.
Ties between the two routes go to spatial.
=================

Everything here is a pure function of (pools, congestion, config).
"""

from decimal import Decimal
from typing import Dict, Optional, Sequence

from core.constants import PAIR_DAI_WETH, PAIR_USDC_DAI, PAIR_WETH_USDC
from core.exceptions import PoolError
from core.math import amm_amount_out
from core.models import (
    LiquidityPool,
    Opportunity,
    Route,
    SpatialRoute,
    TriangularRoute,
)
from strategy.config import SimulationConfig


# =============================================================================
# LEG MATH
# =============================================================================

def spatial_gross_profit(
    buy_pool: LiquidityPool,
    sell_pool: LiquidityPool,
    loan_usd: Decimal,
) -> Decimal:
    """Gross USD profit of buying WETH on buy_pool and selling on sell_pool."""
    weth_bought = amm_amount_out(loan_usd, buy_pool.reserve_b, buy_pool.reserve_a)
    usdc_proceeds = amm_amount_out(weth_bought, sell_pool.reserve_a, sell_pool.reserve_b)
    return usdc_proceeds - loan_usd


def triangular_gross_profit(
    weth_usdc: LiquidityPool,
    usdc_dai: LiquidityPool,
    dai_weth: LiquidityPool,
    start_weth: Decimal,
    eth_price_usd: Decimal,
) -> Decimal:
    """Gross USD profit of chaining start_weth around the triangle."""
    usdc = amm_amount_out(start_weth, weth_usdc.reserve_a, weth_usdc.reserve_b)
    dai = amm_amount_out(usdc, usdc_dai.reserve_a, usdc_dai.reserve_b)
    final_weth = amm_amount_out(dai, dai_weth.reserve_a, dai_weth.reserve_b)
    return (final_weth - start_weth) * eth_price_usd


def loan_value_usd(route: Route, config: SimulationConfig) -> Decimal:
    """Notional borrowed for a route, in USD."""
    if isinstance(route, SpatialRoute):
        return config.thresholds.spatial_loan_usd
    return config.thresholds.triangular_start_weth * config.market.eth_price_usd


def _index(pools: Sequence[LiquidityPool]) -> Dict[str, LiquidityPool]:
    return {p.id: p for p in pools}


def _lookup(index: Dict[str, LiquidityPool], pool_id: str) -> LiquidityPool:
    try:
        return index[pool_id]
    except KeyError:
        raise PoolError(f"Route references unknown pool {pool_id}", details={"pool_id": pool_id}) from None


def evaluate_route(
    route: Route,
    pools: Sequence[LiquidityPool],
    config: SimulationConfig,
) -> Decimal:
    """
    Gross USD profit of a fixed route against the given pool state.

    Used both at scan time and at settlement (against the then-current
    reserves) so that the two estimates are directly comparable.
    """
    index = _index(pools)
    if isinstance(route, SpatialRoute):
        return spatial_gross_profit(
            _lookup(index, route.buy_pool_id),
            _lookup(index, route.sell_pool_id),
            config.thresholds.spatial_loan_usd,
        )
    if isinstance(route, TriangularRoute):
        return triangular_gross_profit(
            _lookup(index, route.weth_usdc_pool_id),
            _lookup(index, route.usdc_dai_pool_id),
            _lookup(index, route.dai_weth_pool_id),
            config.thresholds.triangular_start_weth,
            config.market.eth_price_usd,
        )
    raise TypeError(f"Unsupported route type: {type(route).__name__}")


# =============================================================================
# ROUTE SEARCH
# =============================================================================

def find_spatial(
    pools: Sequence[LiquidityPool],
    congestion: Decimal,
    config: SimulationConfig,
) -> Optional[Opportunity]:
    """Best spatial route, or None if it cannot be formed."""
    candidates = [p for p in pools if p.token_pair == PAIR_WETH_USDC]
    if len(candidates) < 2:
        return None

    # min/max keep the first pool on ties
    buy_pool = min(candidates, key=lambda p: p.price)
    sell_pool = max(candidates, key=lambda p: p.price)
    if buy_pool.id == sell_pool.id:
        return None

    route = SpatialRoute(buy_pool_id=buy_pool.id, sell_pool_id=sell_pool.id)
    loan = loan_value_usd(route, config)
    return Opportunity(
        route=route,
        loan_amount_usd=loan,
        gross_profit=spatial_gross_profit(buy_pool, sell_pool, loan),
        gas_fee=config.fees.gas_fee(congestion),
        loan_fee=config.fees.loan_fee(loan),
        dexes=(buy_pool.dex, sell_pool.dex),
    )


def find_triangular(
    pools: Sequence[LiquidityPool],
    congestion: Decimal,
    config: SimulationConfig,
) -> Optional[Opportunity]:
    """Best triangular route, or None if any pair has no pool."""
    legs = []
    for pair in (PAIR_WETH_USDC, PAIR_USDC_DAI, PAIR_DAI_WETH):
        candidates = [p for p in pools if p.token_pair == pair]
        if not candidates:
            return None
        legs.append(max(candidates, key=lambda p: p.price))

    weth_usdc, usdc_dai, dai_weth = legs
    route = TriangularRoute(
        weth_usdc_pool_id=weth_usdc.id,
        usdc_dai_pool_id=usdc_dai.id,
        dai_weth_pool_id=dai_weth.id,
    )
    loan = loan_value_usd(route, config)
    return Opportunity(
        route=route,
        loan_amount_usd=loan,
        gross_profit=triangular_gross_profit(
            weth_usdc,
            usdc_dai,
            dai_weth,
            config.thresholds.triangular_start_weth,
            config.market.eth_price_usd,
        ),
        gas_fee=config.fees.gas_fee(congestion),
        loan_fee=config.fees.loan_fee(loan),
        dexes=(weth_usdc.dex, usdc_dai.dex, dai_weth.dex),
    )


def scan(
    pools: Sequence[LiquidityPool],
    congestion: Decimal,
    config: SimulationConfig,
) -> Optional[Opportunity]:
    """
    Best opportunity on this pool state.

    Returns None only when both route kinds are disqualified. The result
    is not filtered by the profit threshold; that is the caller's gate.
    """
    spatial = find_spatial(pools, congestion, config)
    triangular = find_triangular(pools, congestion, config)

    if spatial is None:
        return triangular
    if triangular is None:
        return spatial
    return spatial if spatial.net_profit >= triangular.net_profit else triangular
