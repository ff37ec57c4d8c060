# PATH: execution/__init__.py
"""
FLASHSIM execution layer.

This module contains the execution layer components:
- state_machine: Trade settlement and bot status transitions
- lifecycle: Single in-flight transaction (submit -> delay -> settle)
- kill_switch: Halt bookkeeping
- engine: Tick-driven simulation engine and operator commands
"""

from execution.state_machine import (
    StateTransition,
    StatusMachine,
    VALID_STATUS_TRANSITIONS,
    VALID_TRADE_TRANSITIONS,
    settle_trade,
)
from execution.lifecycle import (
    GasTank,
    TransactionLifecycle,
    describe_token_flow,
    new_tx_hash,
)
from execution.kill_switch import (
    HaltReason,
    HaltTrigger,
    KillSwitch,
)
from execution.engine import (
    SimulationEngine,
    TickOutcome,
)

__all__ = [
    # State machine
    "StateTransition",
    "StatusMachine",
    "VALID_STATUS_TRANSITIONS",
    "VALID_TRADE_TRANSITIONS",
    "settle_trade",
    # Lifecycle
    "GasTank",
    "TransactionLifecycle",
    "describe_token_flow",
    "new_tx_hash",
    # Kill switch
    "HaltReason",
    "HaltTrigger",
    "KillSwitch",
    # Engine
    "SimulationEngine",
    "TickOutcome",
]
