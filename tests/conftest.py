# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for FLASHSIM tests.
"""

import sys
from decimal import Decimal
from pathlib import Path
from random import Random

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.models import LiquidityPool  # noqa: E402
from strategy.config import PoolSeed, SimulationConfig  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class ScriptedRandom(Random):
    """
    Random whose random() returns scripted draws first, then falls back
    to the seeded generator. getrandbits() is never scripted.
    """

    def __init__(self, draws=(), seed: int = 0):
        super().__init__(seed)
        self.draws = list(draws)

    def random(self) -> float:
        if self.draws:
            return self.draws.pop(0)
        return super().random()


def make_pool(
    pool_id: str,
    price: str,
    dex: str = "TestDEX",
    token_a: str = "WETH",
    token_b: str = "USDC",
    reserve_a: str = "1000000",
) -> LiquidityPool:
    """Pool with reserve_a tokens A at the given B/A price."""
    a = Decimal(reserve_a)
    b = a * Decimal(price)
    return LiquidityPool(
        id=pool_id,
        dex=dex,
        token_pair=f"{token_a}/{token_b}",
        token_a=token_a,
        token_b=token_b,
        reserve_a=a,
        reserve_b=b,
        price_history=(b / a,),
    )


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng(0.05, 0.9) -> ScriptedRandom."""
    def factory(*draws, seed: int = 0):
        return ScriptedRandom(draws=draws, seed=seed)
    return factory


@pytest.fixture
def pool_factory():
    return make_pool


@pytest.fixture
def spread_pools():
    """Two deep WETH/USDC pools at 2480 and 2520."""
    return [
        make_pool("cheap", "2480", dex="CheapSwap"),
        make_pool("rich", "2520", dex="RichSwap"),
    ]


@pytest.fixture
def spread_config():
    """Config whose pools are the 2480/2520 spread pair."""
    config = SimulationConfig()
    config.pools = [
        PoolSeed("cheap", "CheapSwap", "WETH", "USDC", Decimal("1000000"), Decimal("2480000000")),
        PoolSeed("rich", "RichSwap", "WETH", "USDC", Decimal("1000000"), Decimal("2520000000")),
    ]
    return config


@pytest.fixture
def calm_config(spread_config):
    """Spread config with a frozen market and no front-running."""
    spread_config.market.price_drift = Decimal("0")
    spread_config.market.max_volume_fraction = Decimal("0")
    spread_config.thresholds.front_run_probability = Decimal("0")
    return spread_config
