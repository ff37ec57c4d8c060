"""
market - Mock DeFi market.

Modules:
- pools: Pool store
- mutator: Per-tick drift, external volume and congestion
"""

from market.mutator import advance_pool, advance_pools, next_congestion
from market.pools import PoolStore, pool_from_seed

__all__ = [
    "PoolStore",
    "pool_from_seed",
    "advance_pool",
    "advance_pools",
    "next_congestion",
]
