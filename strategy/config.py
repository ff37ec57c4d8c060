"""
strategy/config.py - Simulation configuration.

Typed view over config/simulation.yaml. Every section has built-in
defaults, so a missing file or a partial file is valid.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from config import DEFAULT_SIMULATION_FILE, load_yaml
from core import constants as C
from core.exceptions import ConfigError


@dataclass
class CongestionConfig:
    """Network congestion random walk."""
    initial: Decimal = Decimal(C.DEFAULT_CONGESTION_INITIAL)
    step: Decimal = Decimal(C.DEFAULT_CONGESTION_STEP)
    min: Decimal = Decimal(C.DEFAULT_CONGESTION_MIN)
    max: Decimal = Decimal(C.DEFAULT_CONGESTION_MAX)


@dataclass
class MarketConfig:
    eth_price_usd: Decimal = Decimal(C.DEFAULT_ETH_PRICE_USD)
    initial_block: int = C.DEFAULT_INITIAL_BLOCK
    price_history_length: int = C.DEFAULT_PRICE_HISTORY_LENGTH
    price_drift: Decimal = Decimal(C.DEFAULT_PRICE_DRIFT)
    max_volume_fraction: Decimal = Decimal(C.DEFAULT_MAX_VOLUME_FRACTION)
    congestion: CongestionConfig = field(default_factory=CongestionConfig)


@dataclass
class FeeConfig:
    gas_base_usd: Decimal = Decimal(C.DEFAULT_GAS_BASE_USD)
    gas_congestion_usd: Decimal = Decimal(C.DEFAULT_GAS_CONGESTION_USD)
    loan_fee_rate: Decimal = Decimal(C.DEFAULT_LOAN_FEE_RATE)

    def gas_fee(self, congestion: Decimal) -> Decimal:
        """Gas fee in USD for the given congestion level."""
        return self.gas_base_usd + self.gas_congestion_usd * congestion

    def loan_fee(self, loan_value_usd: Decimal) -> Decimal:
        """Flash-loan provider fee in USD."""
        return loan_value_usd * self.loan_fee_rate


@dataclass
class Thresholds:
    """Decision thresholds for scanning and settlement."""
    spatial_loan_usd: Decimal = Decimal(C.DEFAULT_SPATIAL_LOAN_USD)
    triangular_start_weth: Decimal = Decimal(C.DEFAULT_TRIANGULAR_START_WETH)
    min_net_profit_usd: Decimal = Decimal(C.DEFAULT_MIN_NET_PROFIT_USD)
    front_run_probability: Decimal = Decimal(C.DEFAULT_FRONT_RUN_PROBABILITY)
    slippage_retention: Decimal = Decimal(C.DEFAULT_SLIPPAGE_RETENTION)
    alert_failure_streak: int = C.DEFAULT_ALERT_FAILURE_STREAK


@dataclass
class GasTankConfig:
    initial_eth: Decimal = Decimal(C.DEFAULT_INITIAL_GAS_TANK_ETH)
    faucet_eth: Decimal = Decimal(C.DEFAULT_FAUCET_AMOUNT_ETH)
    min_operating_usd: Decimal = Decimal(C.DEFAULT_MIN_GAS_TANK_USD)


@dataclass
class TimingConfig:
    tick_interval_ms: int = C.DEFAULT_TICK_INTERVAL_MS
    resolve_delay_ms: int = C.DEFAULT_RESOLVE_DELAY_MS


@dataclass
class RetentionConfig:
    max_trades: int = C.MAX_TRADES
    max_log_entries: int = C.MAX_LOG_ENTRIES


@dataclass(frozen=True)
class PoolSeed:
    """Starting state of one pool."""
    id: str
    dex: str
    token_a: str
    token_b: str
    reserve_a: Decimal
    reserve_b: Decimal

    @property
    def token_pair(self) -> str:
        return f"{self.token_a}/{self.token_b}"


DEFAULT_POOL_SEEDS: list[PoolSeed] = [
    PoolSeed("1", "Uniswap v3", "WETH", "USDC", Decimal("2000000"), Decimal("5000000000")),
    PoolSeed("2", "SushiSwap", "WETH", "USDC", Decimal("1500000"), Decimal("3757500000")),
    PoolSeed("3", "Curve", "WETH", "USDC", Decimal("2500000"), Decimal("6242500000")),
    PoolSeed("4", "Balancer", "WETH", "USDC", Decimal("1800000"), Decimal("4509000000")),
    PoolSeed("5", "Uniswap v3", "USDC", "DAI", Decimal("1000000000"), Decimal("1001000000")),
    PoolSeed("6", "Curve", "USDC", "DAI", Decimal("2000000000"), Decimal("1998000000")),
    PoolSeed("7", "SushiSwap", "DAI", "WETH", Decimal("4000000000"), Decimal("1600000")),
    PoolSeed("8", "Balancer", "DAI", "WETH", Decimal("3000000000"), Decimal("1205000")),
]


@dataclass
class SimulationConfig:
    """Full simulation configuration."""
    market: MarketConfig = field(default_factory=MarketConfig)
    fees: FeeConfig = field(default_factory=FeeConfig)
    thresholds: Thresholds = field(default_factory=Thresholds)
    gas_tank: GasTankConfig = field(default_factory=GasTankConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    pools: list[PoolSeed] = field(default_factory=lambda: list(DEFAULT_POOL_SEEDS))

    def validate(self) -> None:
        """
        Check cross-field constraints.

        Raises:
            ConfigError: on the first violated constraint
        """
        congestion = self.market.congestion
        if not (Decimal("0") < congestion.min <= congestion.max):
            raise ConfigError(
                "Congestion bounds must satisfy 0 < min <= max",
                details={"min": str(congestion.min), "max": str(congestion.max)},
            )
        if not (congestion.min <= congestion.initial <= congestion.max):
            raise ConfigError(
                "Initial congestion must lie within bounds",
                details={"initial": str(congestion.initial)},
            )
        if self.market.eth_price_usd <= 0:
            raise ConfigError("eth_price_usd must be positive")
        if self.market.price_history_length < 1:
            raise ConfigError("price_history_length must be >= 1")
        if not (Decimal("0") <= self.market.price_drift < Decimal("1")):
            raise ConfigError(
                "price_drift must be within [0, 1)",
                details={"price_drift": str(self.market.price_drift)},
            )
        if not (Decimal("0") <= self.market.max_volume_fraction < Decimal("1")):
            raise ConfigError(
                "max_volume_fraction must be within [0, 1)",
                details={"max_volume_fraction": str(self.market.max_volume_fraction)},
            )
        if not (Decimal("0") <= self.thresholds.front_run_probability <= Decimal("1")):
            raise ConfigError("front_run_probability must be within [0, 1]")
        if not (Decimal("0") <= self.thresholds.slippage_retention <= Decimal("1")):
            raise ConfigError(
                "slippage_retention must be within [0, 1]",
                details={"slippage_retention": str(self.thresholds.slippage_retention)},
            )
        if self.thresholds.alert_failure_streak < 1:
            raise ConfigError("alert_failure_streak must be >= 1")
        if self.timing.tick_interval_ms <= 0 or self.timing.resolve_delay_ms < 0:
            raise ConfigError(
                "Timing values must be positive",
                details={
                    "tick_interval_ms": self.timing.tick_interval_ms,
                    "resolve_delay_ms": self.timing.resolve_delay_ms,
                },
            )
        negative = [
            name for name, value in (
                ("gas_base_usd", self.fees.gas_base_usd),
                ("gas_congestion_usd", self.fees.gas_congestion_usd),
                ("loan_fee_rate", self.fees.loan_fee_rate),
                ("min_net_profit_usd", self.thresholds.min_net_profit_usd),
                ("min_operating_usd", self.gas_tank.min_operating_usd),
                ("initial_eth", self.gas_tank.initial_eth),
                ("faucet_eth", self.gas_tank.faucet_eth),
            )
            if value < 0
        ]
        if negative:
            raise ConfigError("Negative values are not allowed", details={"fields": negative})

        seen: set[str] = set()
        for seed in self.pools:
            if seed.id in seen:
                raise ConfigError(f"Duplicate pool id: {seed.id}")
            seen.add(seed.id)
            if seed.reserve_a <= 0 or seed.reserve_b <= 0:
                raise ConfigError(
                    f"Pool {seed.id} reserves must be positive",
                    details={"reserve_a": str(seed.reserve_a), "reserve_b": str(seed.reserve_b)},
                )


def _dec(section: dict[str, Any], key: str, default: Decimal) -> Decimal:
    value = section.get(key)
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"Invalid decimal for '{key}': {value!r}") from e


def _int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid integer for '{key}': {value!r}") from e


def _parse_pools(raw: list[dict[str, Any]]) -> list[PoolSeed]:
    seeds = []
    for entry in raw:
        try:
            seeds.append(PoolSeed(
                id=str(entry["id"]),
                dex=str(entry["dex"]),
                token_a=str(entry["token_a"]),
                token_b=str(entry["token_b"]),
                reserve_a=Decimal(str(entry["reserve_a"])),
                reserve_b=Decimal(str(entry["reserve_b"])),
            ))
        except KeyError as e:
            raise ConfigError(f"Pool entry missing field {e}", details={"entry": entry}) from e
        except (InvalidOperation, ValueError) as e:
            raise ConfigError("Pool entry has invalid reserves", details={"entry": entry}) from e
    return seeds


def parse_simulation_config(data: dict[str, Any]) -> SimulationConfig:
    """
    Build a SimulationConfig from a parsed YAML mapping.

    Unknown keys are ignored; missing keys keep their defaults.
    """
    defaults = SimulationConfig()

    market_data = data.get("market", {}) or {}
    congestion_data = market_data.get("congestion", {}) or {}
    d_market = defaults.market
    d_cong = d_market.congestion
    market = MarketConfig(
        eth_price_usd=_dec(market_data, "eth_price_usd", d_market.eth_price_usd),
        initial_block=_int(market_data, "initial_block", d_market.initial_block),
        price_history_length=_int(market_data, "price_history_length", d_market.price_history_length),
        price_drift=_dec(market_data, "price_drift", d_market.price_drift),
        max_volume_fraction=_dec(market_data, "max_volume_fraction", d_market.max_volume_fraction),
        congestion=CongestionConfig(
            initial=_dec(congestion_data, "initial", d_cong.initial),
            step=_dec(congestion_data, "step", d_cong.step),
            min=_dec(congestion_data, "min", d_cong.min),
            max=_dec(congestion_data, "max", d_cong.max),
        ),
    )

    fees_data = data.get("fees", {}) or {}
    fees = FeeConfig(
        gas_base_usd=_dec(fees_data, "gas_base_usd", defaults.fees.gas_base_usd),
        gas_congestion_usd=_dec(fees_data, "gas_congestion_usd", defaults.fees.gas_congestion_usd),
        loan_fee_rate=_dec(fees_data, "loan_fee_rate", defaults.fees.loan_fee_rate),
    )

    t_data = data.get("thresholds", {}) or {}
    d_t = defaults.thresholds
    thresholds = Thresholds(
        spatial_loan_usd=_dec(t_data, "spatial_loan_usd", d_t.spatial_loan_usd),
        triangular_start_weth=_dec(t_data, "triangular_start_weth", d_t.triangular_start_weth),
        min_net_profit_usd=_dec(t_data, "min_net_profit_usd", d_t.min_net_profit_usd),
        front_run_probability=_dec(t_data, "front_run_probability", d_t.front_run_probability),
        slippage_retention=_dec(t_data, "slippage_retention", d_t.slippage_retention),
        alert_failure_streak=_int(t_data, "alert_failure_streak", d_t.alert_failure_streak),
    )

    tank_data = data.get("gas_tank", {}) or {}
    gas_tank = GasTankConfig(
        initial_eth=_dec(tank_data, "initial_eth", defaults.gas_tank.initial_eth),
        faucet_eth=_dec(tank_data, "faucet_eth", defaults.gas_tank.faucet_eth),
        min_operating_usd=_dec(tank_data, "min_operating_usd", defaults.gas_tank.min_operating_usd),
    )

    timing_data = data.get("timing", {}) or {}
    timing = TimingConfig(
        tick_interval_ms=_int(timing_data, "tick_interval_ms", defaults.timing.tick_interval_ms),
        resolve_delay_ms=_int(timing_data, "resolve_delay_ms", defaults.timing.resolve_delay_ms),
    )

    retention_data = data.get("retention", {}) or {}
    retention = RetentionConfig(
        max_trades=_int(retention_data, "max_trades", defaults.retention.max_trades),
        max_log_entries=_int(retention_data, "max_log_entries", defaults.retention.max_log_entries),
    )

    pools = _parse_pools(data["pools"]) if data.get("pools") else defaults.pools

    config = SimulationConfig(
        market=market,
        fees=fees,
        thresholds=thresholds,
        gas_tank=gas_tank,
        timing=timing,
        retention=retention,
        pools=pools,
    )
    config.validate()
    return config


def load_simulation_config(config_path: Path | None = None) -> SimulationConfig:
    """
    Load simulation configuration from a YAML file.

    Args:
        config_path: Path to a simulation.yaml (default: config/simulation.yaml)

    Returns:
        SimulationConfig; built-in defaults if the file does not exist
    """
    if config_path is None:
        config_path = DEFAULT_SIMULATION_FILE
    config_path = Path(config_path).resolve()

    if not config_path.exists():
        return SimulationConfig()

    try:
        data = load_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")

    return parse_simulation_config(data)
