"""
tests/unit/test_scanner.py - Opportunity scanner.
"""

from decimal import Decimal

import pytest

from core.constants import RouteKind
from core.exceptions import PoolError
from core.math import amm_amount_out
from core.models import SpatialRoute, TriangularRoute
from market.pools import PoolStore
from strategy.config import SimulationConfig
from strategy.scanner import (
    evaluate_route,
    find_spatial,
    find_triangular,
    loan_value_usd,
    scan,
    spatial_gross_profit,
)

CONGESTION = Decimal("0.5")


@pytest.fixture
def config():
    return SimulationConfig()


class TestSpatial:

    def test_profitable_spread(self, spread_pools, config):
        opp = find_spatial(spread_pools, CONGESTION, config)

        assert opp is not None
        assert opp.route == SpatialRoute(buy_pool_id="cheap", sell_pool_id="rich")
        assert opp.dexes == ("CheapSwap", "RichSwap")
        assert opp.loan_amount_usd == Decimal("1000000")
        assert opp.gas_fee == Decimal("80")
        assert opp.loan_fee == Decimal("900")
        assert opp.gross_profit > 0
        assert opp.net_profit > Decimal("50")

    def test_gross_matches_two_leg_formula(self, spread_pools):
        cheap, rich = spread_pools
        loan = Decimal("1000000")
        weth = amm_amount_out(loan, cheap.reserve_b, cheap.reserve_a)
        usdc = amm_amount_out(weth, rich.reserve_a, rich.reserve_b)
        assert spatial_gross_profit(cheap, rich, loan) == usdc - loan

    def test_single_pool_disqualified(self, pool_factory, config):
        assert find_spatial([pool_factory("a", "2500")], CONGESTION, config) is None

    def test_identical_prices_disqualified(self, pool_factory, config):
        pools = [pool_factory("a", "2500"), pool_factory("b", "2500")]
        assert find_spatial(pools, CONGESTION, config) is None

    def test_ignores_other_pairs(self, pool_factory, config):
        pools = [
            pool_factory("a", "2500"),
            pool_factory("dai", "1.001", token_a="USDC", token_b="DAI", reserve_a="1000000000"),
        ]
        assert find_spatial(pools, CONGESTION, config) is None


class TestTriangular:

    def _triangle(self, pool_factory):
        return [
            pool_factory("wu1", "2500"),
            pool_factory("wu2", "2510"),
            pool_factory("ud", "1.000", token_a="USDC", token_b="DAI", reserve_a="5000000000"),
            pool_factory("dw", "0.000401", token_a="DAI", token_b="WETH", reserve_a="5000000000"),
        ]

    def test_picks_highest_price_per_pair(self, pool_factory, config):
        opp = find_triangular(self._triangle(pool_factory), CONGESTION, config)

        assert opp is not None
        assert opp.kind == RouteKind.TRIANGULAR
        assert opp.route == TriangularRoute("wu2", "ud", "dw")
        assert opp.loan_amount_usd == Decimal("1000000")

    def test_profit_in_usd(self, pool_factory, config):
        pools = self._triangle(pool_factory)
        opp = find_triangular(pools, CONGESTION, config)
        # 2510 * 1.000 * 0.000401 > 1, so the cycle gains WETH
        assert opp.gross_profit > 0
        assert opp.loan_fee == Decimal("900")

    def test_missing_pair_disqualified(self, pool_factory, config):
        pools = self._triangle(pool_factory)[:3]
        assert find_triangular(pools, CONGESTION, config) is None


class TestScan:

    def test_none_when_both_disqualified(self, pool_factory, config):
        assert scan([pool_factory("a", "2500")], CONGESTION, config) is None

    def test_falls_back_to_available_route(self, spread_pools, config):
        opp = scan(spread_pools, CONGESTION, config)
        assert opp.kind == RouteKind.SPATIAL

    def test_returns_unprofitable_best(self, pool_factory, config):
        # Scan does not filter by threshold
        pools = [pool_factory("a", "2500"), pool_factory("b", "2500.5")]
        opp = scan(pools, CONGESTION, config)
        assert opp is not None
        assert opp.net_profit < 0

    def test_default_pools(self, config):
        store = PoolStore.from_seeds(config.pools, 20)
        opp = scan(store.pools, CONGESTION, config)
        spatial = find_spatial(store.pools, CONGESTION, config)
        triangular = find_triangular(store.pools, CONGESTION, config)

        assert opp is not None
        best = spatial if spatial.net_profit >= triangular.net_profit else triangular
        assert opp == best

    def test_tie_goes_to_spatial(self, spread_pools, config, monkeypatch):
        import strategy.scanner as scanner

        spatial = find_spatial(spread_pools, CONGESTION, config)
        triangular = type(spatial)(
            route=TriangularRoute("x", "y", "z"),
            loan_amount_usd=spatial.loan_amount_usd,
            gross_profit=spatial.gross_profit,
            gas_fee=spatial.gas_fee,
            loan_fee=spatial.loan_fee,
        )
        monkeypatch.setattr(scanner, "find_triangular", lambda *args: triangular)

        assert scanner.scan(spread_pools, CONGESTION, config) == spatial


class TestEvaluateRoute:

    def test_matches_scan_estimate(self, spread_pools, config):
        opp = find_spatial(spread_pools, CONGESTION, config)
        assert evaluate_route(opp.route, spread_pools, config) == opp.gross_profit

    def test_unknown_pool(self, spread_pools, config):
        with pytest.raises(PoolError):
            evaluate_route(SpatialRoute("cheap", "ghost"), spread_pools, config)

    def test_unsupported_route(self, spread_pools, config):
        with pytest.raises(TypeError):
            evaluate_route(object(), spread_pools, config)

    def test_loan_value(self, config):
        assert loan_value_usd(SpatialRoute("a", "b"), config) == Decimal("1000000")
        assert loan_value_usd(TriangularRoute("a", "b", "c"), config) == Decimal("1000000")
