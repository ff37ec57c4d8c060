"""
core - Core utilities and models for FLASHSIM.

This package contains:
- models.py: Data models (LiquidityPool, routes, Opportunity, Trade, ChecklistState)
- constants.py: Enums and defaults
- exceptions.py: Typed exceptions with error codes
- math.py: Decimal helpers and constant-product math
- time.py: Logical simulation clock
- format_money.py: Money formatting
- logging.py: Structured JSON logging
"""

from core.constants import (
    BotStatus,
    ChecklistFlag,
    ErrorCode,
    FailureReason,
    RouteKind,
    Severity,
    TradeStatus,
)
from core.exceptions import (
    CommandRejected,
    ConfigError,
    InvalidTransitionError,
    PoolError,
    SimulatorError,
    SinglePendingViolation,
)
from core.logging import get_logger, setup_logging
from core.models import (
    ChecklistState,
    LiquidityPool,
    LogEntry,
    Opportunity,
    PendingTransaction,
    Route,
    SpatialRoute,
    Trade,
    TriangularRoute,
)

__all__ = [
    # Constants
    "BotStatus",
    "ChecklistFlag",
    "ErrorCode",
    "FailureReason",
    "RouteKind",
    "Severity",
    "TradeStatus",
    # Exceptions
    "CommandRejected",
    "ConfigError",
    "InvalidTransitionError",
    "PoolError",
    "SimulatorError",
    "SinglePendingViolation",
    # Models
    "ChecklistState",
    "LiquidityPool",
    "LogEntry",
    "Opportunity",
    "PendingTransaction",
    "Route",
    "SpatialRoute",
    "Trade",
    "TriangularRoute",
    # Logging
    "get_logger",
    "setup_logging",
]
