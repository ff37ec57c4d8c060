# PATH: tests/unit/test_config.py
"""
Unit tests for configuration loading.
"""

import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from config import CONFIG_DIR, DEFAULT_SIMULATION_FILE, load_yaml
from core.exceptions import ConfigError
from strategy.config import (
    DEFAULT_POOL_SEEDS,
    SimulationConfig,
    load_simulation_config,
    parse_simulation_config,
)


class TestConfigLoading(unittest.TestCase):
    """Tests for config loading functions."""

    def test_config_dir_exists(self):
        self.assertTrue(CONFIG_DIR.exists())
        self.assertTrue(DEFAULT_SIMULATION_FILE.exists())

    def test_load_yaml_relative_name(self):
        data = load_yaml("simulation.yaml")
        self.assertIn("market", data)
        self.assertEqual(len(data["pools"]), 8)

    def test_load_yaml_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_yaml("does_not_exist.yaml")

    def test_bundled_file_matches_defaults(self):
        config = load_simulation_config()
        defaults = SimulationConfig()

        self.assertEqual(config.market.eth_price_usd, Decimal("2500"))
        self.assertEqual(config.market.initial_block, 19_845_321)
        self.assertEqual(config.fees.gas_fee(Decimal("0.5")), Decimal("80"))
        self.assertEqual(config.thresholds.min_net_profit_usd, Decimal("50"))
        self.assertEqual(config.timing.resolve_delay_ms, 3000)
        self.assertEqual(config.pools, defaults.pools)
        self.assertEqual(len(config.pools), len(DEFAULT_POOL_SEEDS))

    def test_missing_file_gives_defaults(self):
        config = load_simulation_config(Path("/nonexistent/simulation.yaml"))
        self.assertEqual(config, SimulationConfig())


class TestParseSimulationConfig(unittest.TestCase):

    def test_partial_override(self):
        config = parse_simulation_config({
            "thresholds": {"front_run_probability": "0.25"},
            "timing": {"tick_interval_ms": 500},
        })
        self.assertEqual(config.thresholds.front_run_probability, Decimal("0.25"))
        self.assertEqual(config.timing.tick_interval_ms, 500)
        # Untouched sections keep defaults
        self.assertEqual(config.thresholds.min_net_profit_usd, Decimal("50"))
        self.assertEqual(config.fees.loan_fee_rate, Decimal("0.0009"))

    def test_unknown_keys_ignored(self):
        config = parse_simulation_config({"dashboard": {"theme": "dark"}})
        self.assertEqual(config, SimulationConfig())

    def test_loan_fee(self):
        config = SimulationConfig()
        self.assertEqual(config.fees.loan_fee(Decimal("1000000")), Decimal("900"))

    def test_invalid_congestion_bounds(self):
        with self.assertRaises(ConfigError):
            parse_simulation_config({"market": {"congestion": {"min": "0.9", "max": "0.2"}}})

    def test_invalid_decimal(self):
        with self.assertRaises(ConfigError):
            parse_simulation_config({"fees": {"gas_base_usd": "lots"}})

    def test_negative_threshold(self):
        with self.assertRaises(ConfigError):
            parse_simulation_config({"thresholds": {"min_net_profit_usd": "-1"}})

    def test_duplicate_pool_ids(self):
        pool = {"id": "1", "dex": "A", "token_a": "WETH", "token_b": "USDC",
                "reserve_a": "10", "reserve_b": "25000"}
        with self.assertRaises(ConfigError):
            parse_simulation_config({"pools": [pool, dict(pool)]})

    def test_pool_missing_field(self):
        with self.assertRaises(ConfigError):
            parse_simulation_config({"pools": [{"id": "1", "dex": "A"}]})

    def test_non_positive_reserves(self):
        pool = {"id": "1", "dex": "A", "token_a": "WETH", "token_b": "USDC",
                "reserve_a": "0", "reserve_b": "25000"}
        with self.assertRaises(ConfigError):
            parse_simulation_config({"pools": [pool]})

    def test_bad_yaml_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yaml"
            path.write_text("market: [unclosed\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_simulation_config(path)

    def test_non_mapping_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "list.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_simulation_config(path)


class TestMarketBounds(unittest.TestCase):
    """Fractions that would break the tick loop are rejected at load time."""

    def test_volume_fraction_of_whole_pool(self):
        for value in ("1", "1.5", "-0.1"):
            with self.subTest(max_volume_fraction=value):
                with self.assertRaises(ConfigError) as ctx:
                    parse_simulation_config({"market": {"max_volume_fraction": value}})
                self.assertIn("max_volume_fraction", str(ctx.exception))

    def test_price_drift_bounds(self):
        for value in ("1", "2", "-0.01"):
            with self.subTest(price_drift=value):
                with self.assertRaises(ConfigError):
                    parse_simulation_config({"market": {"price_drift": value}})

    def test_slippage_retention_bounds(self):
        for value in ("1.01", "-0.5"):
            with self.subTest(slippage_retention=value):
                with self.assertRaises(ConfigError):
                    parse_simulation_config({"thresholds": {"slippage_retention": value}})

    def test_edges_accepted(self):
        config = parse_simulation_config({
            "market": {"price_drift": "0", "max_volume_fraction": "0.99"},
            "thresholds": {"slippage_retention": "1"},
        })
        self.assertEqual(config.market.max_volume_fraction, Decimal("0.99"))
        self.assertEqual(config.thresholds.slippage_retention, Decimal("1"))

    def test_validate_on_mutated_config(self):
        config = SimulationConfig()
        config.market.max_volume_fraction = Decimal("1.5")
        with self.assertRaises(ConfigError):
            config.validate()
