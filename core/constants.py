"""
Constants for FLASHSIM.

Contains enums, defaults, and configuration constants.

All monetary defaults are strings so they can be turned into Decimal
without float contamination.
"""

from decimal import Decimal
from enum import Enum
from typing import Final, List, Tuple

# =============================================================================
# MARKET DEFAULTS
# =============================================================================

# Reference ETH price used for gas-tank and triangular USD conversion
DEFAULT_ETH_PRICE_USD = "2500"

# Mock chain head at session start
DEFAULT_INITIAL_BLOCK = 19_845_321

# Rolling price history capacity per pool
DEFAULT_PRICE_HISTORY_LENGTH = 20

# Per-tick drift (± fraction) and external volume (fraction of reserve A)
DEFAULT_PRICE_DRIFT = "0.0005"
DEFAULT_MAX_VOLUME_FRACTION = "0.01"

# Network congestion random walk
DEFAULT_CONGESTION_INITIAL = "0.5"
DEFAULT_CONGESTION_STEP = "0.1"
DEFAULT_CONGESTION_MIN = "0.1"
DEFAULT_CONGESTION_MAX = "1.0"

# =============================================================================
# FEES & THRESHOLDS
# =============================================================================

DEFAULT_GAS_BASE_USD = "30"
DEFAULT_GAS_CONGESTION_USD = "100"
DEFAULT_LOAN_FEE_RATE = "0.0009"  # 0.09%

DEFAULT_SPATIAL_LOAN_USD = "1000000"
DEFAULT_TRIANGULAR_START_WETH = "400"

DEFAULT_MIN_NET_PROFIT_USD = "50"
DEFAULT_MIN_GAS_TANK_USD = "100"

DEFAULT_FRONT_RUN_PROBABILITY = "0.1"
DEFAULT_SLIPPAGE_RETENTION = "0.5"
DEFAULT_ALERT_FAILURE_STREAK = 3

# =============================================================================
# TIMING
# =============================================================================

DEFAULT_TICK_INTERVAL_MS = 1500
DEFAULT_RESOLVE_DELAY_MS = 3000

# =============================================================================
# GAS TANK
# =============================================================================

DEFAULT_INITIAL_GAS_TANK_ETH = "0.5"
DEFAULT_FAUCET_AMOUNT_ETH = "0.5"

# =============================================================================
# RETENTION
# =============================================================================

MAX_TRADES: Final = 100
MAX_LOG_ENTRIES: Final = 200

# Placeholder addresses shown on trade details
BOT_ADDRESS: Final = "0xBOT...dE4d"
LOAN_PROVIDER_ADDRESS: Final = "0xAAVE...v3"

# =============================================================================
# TOKEN PAIRS
# =============================================================================

PAIR_WETH_USDC: Final = "WETH/USDC"
PAIR_USDC_DAI: Final = "USDC/DAI"
PAIR_DAI_WETH: Final = "DAI/WETH"

# Triangular cycle: WETH -> USDC -> DAI -> WETH
TRIANGULAR_PAIRS: Tuple[str, str, str] = (PAIR_WETH_USDC, PAIR_USDC_DAI, PAIR_DAI_WETH)
TRIANGULAR_LABEL: Final = "WETH/USDC/DAI"

ZERO = Decimal("0")


class BotStatus(str, Enum):
    """Simulation status (mutually exclusive)."""
    STOPPED = "STOPPED"
    LIVE = "LIVE"
    BACKTESTING = "BACKTESTING"


class RouteKind(str, Enum):
    """Arbitrage route kinds."""
    SPATIAL = "spatial"
    TRIANGULAR = "triangular"


class TradeStatus(str, Enum):
    """Trade record status."""
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class FailureReason(str, Enum):
    """Modeled business failure outcomes recorded on a Trade."""
    FRONT_RUN = "front-run"
    SLIPPAGE = "slippage"
    UNPROFITABLE = "unprofitable"


FAILURE_DESCRIPTIONS = {
    FailureReason.FRONT_RUN: "Front-run by competing bot",
    FailureReason.SLIPPAGE: "Price moved against trade (Slippage)",
    FailureReason.UNPROFITABLE: "Not profitable",
}


class Severity(str, Enum):
    """Event severity for the operator log."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ChecklistFlag(str, Enum):
    """Deployment-readiness proof flags."""
    PROFITABLE_TRADE = "profitable_trade"
    TRIANGULAR_ARBITRAGE = "triangular_arbitrage"
    CALCULATES_NET_PROFIT = "calculates_net_profit"
    REVERTS_UNPROFITABLE = "reverts_unprofitable"
    HANDLES_FRONT_RUNNING = "handles_front_running"
    HANDLES_PRICE_SLIPPAGE = "handles_price_slippage"
    KILL_SWITCH = "kill_switch"
    SENDS_ALERTS = "sends_alerts"


ALL_CHECKLIST_FLAGS: List[ChecklistFlag] = list(ChecklistFlag)


class ErrorCode(str, Enum):
    """Error codes carried by SimulatorError subclasses."""
    UNKNOWN = "UNKNOWN"
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    POOL_NOT_FOUND = "POOL_NOT_FOUND"
    POOL_INVALID_RESERVES = "POOL_INVALID_RESERVES"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PENDING_SLOT_OCCUPIED = "PENDING_SLOT_OCCUPIED"
    COMMAND_REJECTED = "COMMAND_REJECTED"
