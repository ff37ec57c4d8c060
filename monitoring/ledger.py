"""
monitoring/ledger.py - Trade ledger and readiness checklist.

ACCOUNTING CONTRACT:
====================
- trades are kept newest first, at most max_trades retained
- total_profit is the sum of net_profit over Success settlements only
- a Failed settlement never changes total_profit
- consecutive_failures resets on Success, increments on Failed
- the failure-streak alert fires once per streak, when the streak
  reaches alert_streak exactly
- checklist flags are monotonic for the life of the ledger
- counts, win rate and the equity curve cover every settlement, not
  just the retained trades
====================
"""

from decimal import Decimal
from typing import Any, Dict, List

from core.constants import MAX_TRADES, ZERO, ChecklistFlag, TradeStatus
from core.exceptions import InvalidTransitionError
from core.logging import get_logger
from core.models import ChecklistState, Trade

logger = get_logger(__name__)


class Ledger:
    """Accumulates trades, profit, failure streaks and checklist flags."""

    def __init__(self, max_trades: int = MAX_TRADES, alert_streak: int = 3):
        self.max_trades = max_trades
        self.alert_streak = alert_streak
        self._trades: List[Trade] = []
        self.total_profit: Decimal = ZERO
        self.consecutive_failures = 0
        self.success_count = 0
        self.failure_count = 0
        self.checklist = ChecklistState()
        self._profit_curve: List[Decimal] = []
        self._equity = ZERO
        self._equity_curve: List[Decimal] = []

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    @property
    def trades(self) -> List[Trade]:
        """Retained trades, newest first."""
        return list(self._trades)

    def add_pending(self, trade: Trade) -> None:
        """Record a freshly submitted trade at the head of the list."""
        if trade.status != TradeStatus.PENDING:
            raise InvalidTransitionError(
                f"Only Pending trades can be added, got {trade.status.value}",
                details={"trade_id": trade.trade_id},
            )
        self._trades.insert(0, trade)
        del self._trades[self.max_trades:]

    # ------------------------------------------------------------------
    # Settlement accounting
    # ------------------------------------------------------------------

    def record_success(self, trade: Trade) -> None:
        """Account for a trade already settled as Success."""
        if trade.status != TradeStatus.SUCCESS:
            raise InvalidTransitionError(
                f"Trade {trade.trade_id} is {trade.status.value}, not Success",
                details={"trade_id": trade.trade_id},
            )
        self.total_profit += trade.net_profit
        self.success_count += 1
        self.consecutive_failures = 0
        self._profit_curve.append(self.total_profit)
        self._record_equity(trade)

    def record_failure(self, trade: Trade) -> bool:
        """
        Account for a trade already settled as Failed.

        Returns:
            True if this failure completes an alert-worthy streak
        """
        if trade.status != TradeStatus.FAILED:
            raise InvalidTransitionError(
                f"Trade {trade.trade_id} is {trade.status.value}, not Failed",
                details={"trade_id": trade.trade_id},
            )
        self.failure_count += 1
        self.consecutive_failures += 1
        self.checklist.mark(ChecklistFlag.REVERTS_UNPROFITABLE)
        self._record_equity(trade)

        if self.consecutive_failures == self.alert_streak:
            self.checklist.mark(ChecklistFlag.SENDS_ALERTS)
            logger.warning(
                "Failure streak alert",
                extra={"context": {"streak": self.consecutive_failures, "trade_id": trade.trade_id}},
            )
            return True
        return False

    def _record_equity(self, trade: Trade) -> None:
        self._equity += trade.net_profit
        self._equity_curve.append(self._equity)

    def mark(self, flag: ChecklistFlag) -> bool:
        return self.checklist.mark(flag)

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self._trades if t.status == TradeStatus.PENDING)

    @property
    def settled_count(self) -> int:
        return self.success_count + self.failure_count

    @property
    def win_rate(self) -> Decimal:
        """successes / (successes + failures); pending trades excluded."""
        if self.settled_count == 0:
            return ZERO
        return Decimal(self.success_count) / Decimal(self.settled_count)

    @property
    def profit_curve(self) -> List[Decimal]:
        """Cumulative profit after each Success settlement."""
        return list(self._profit_curve)

    @property
    def equity_curve(self) -> List[Decimal]:
        """Cumulative net PnL after every settlement (Failed adds minus its gas fee)."""
        return list(self._equity_curve)

    def get_summary(self) -> Dict[str, Any]:
        return {
            "trade_count": len(self._trades),
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "pending_count": self.pending_count,
            "win_rate": str(self.win_rate),
            "total_profit": str(self.total_profit),
            "consecutive_failures": self.consecutive_failures,
            "checklist": self.checklist.to_dict(),
        }
