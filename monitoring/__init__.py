# PATH: monitoring/__init__.py
"""
Monitoring package for FLASHSIM.

- events: Operator event log (bounded, mirrored to logging)
- ledger: Trades, profit, failure streak, checklist
- report: Backtest report and drawdown
"""

from monitoring.events import EventLog, SEVERITY_LEVELS
from monitoring.ledger import Ledger
from monitoring.report import (
    BacktestReport,
    max_drawdown_pct,
)

__all__ = [
    "EventLog",
    "SEVERITY_LEVELS",
    "Ledger",
    "BacktestReport",
    "max_drawdown_pct",
]
