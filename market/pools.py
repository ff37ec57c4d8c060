"""
market/pools.py - Pool store.

Holds the current set of liquidity pools in a stable order. Pools are
immutable; each tick replaces the whole set atomically.
"""

from typing import Dict, Iterable, List, Sequence

from core.exceptions import PoolError
from core.models import LiquidityPool
from strategy.config import PoolSeed


def pool_from_seed(seed: PoolSeed, history_length: int) -> LiquidityPool:
    """Create a pool whose whole history sits at the seed price."""
    price = seed.reserve_b / seed.reserve_a
    return LiquidityPool(
        id=seed.id,
        dex=seed.dex,
        token_pair=seed.token_pair,
        token_a=seed.token_a,
        token_b=seed.token_b,
        reserve_a=seed.reserve_a,
        reserve_b=seed.reserve_b,
        price_history=tuple(price for _ in range(history_length)),
    )


class PoolStore:
    """
    Ordered, id-indexed set of pools.

    Order is the configuration order and never changes, so scans that
    break ties by position are reproducible.
    """

    def __init__(self, pools: Iterable[LiquidityPool] = ()):
        self._pools: Dict[str, LiquidityPool] = {}
        self.replace_all(pools)

    @classmethod
    def from_seeds(cls, seeds: Sequence[PoolSeed], history_length: int) -> "PoolStore":
        return cls(pool_from_seed(seed, history_length) for seed in seeds)

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self):
        return iter(self._pools.values())

    @property
    def pools(self) -> List[LiquidityPool]:
        return list(self._pools.values())

    def replace_all(self, pools: Iterable[LiquidityPool]) -> None:
        """Swap in a new pool set (same ids expected after the first load)."""
        new_pools: Dict[str, LiquidityPool] = {}
        for pool in pools:
            if pool.id in new_pools:
                raise PoolError(f"Duplicate pool id: {pool.id}", details={"pool_id": pool.id})
            new_pools[pool.id] = pool
        self._pools = new_pools

    def to_list(self) -> List[dict]:
        return [p.to_dict() for p in self._pools.values()]
