"""
monitoring/report.py - Backtest and session reports.

Figures come from the ledger totals, which cover every settlement of
the run; the retained trade list is capped. The equity curve counts
Success at its net profit and Failed at minus its gas fee. Max drawdown
is the largest fall from a running positive peak, in percent.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from core.constants import ZERO
from core.format_money import format_money, format_pct, format_usd
from core.models import Trade
from monitoring.ledger import Ledger

HUNDRED = Decimal("100")


def max_drawdown_pct(curve: Iterable[Decimal]) -> Decimal:
    """
    Largest peak-to-trough fall in percent of the peak.

    Only positive peaks count; a curve that never rises above zero has
    no drawdown.
    """
    peak = ZERO
    worst = ZERO
    for value in curve:
        if value > peak:
            peak = value
        if peak > 0:
            drawdown = (peak - value) / peak * HUNDRED
            if drawdown > worst:
                worst = drawdown
    return worst


@dataclass
class BacktestReport:
    """Summary of an isolated backtest run."""
    ticks: int
    total_profit: Decimal
    win_rate: Decimal
    max_drawdown: Decimal
    profitable_trades: int
    failed_trades: int
    trades: List[Trade] = field(default_factory=list)

    @classmethod
    def from_ledger(cls, ticks: int, ledger: Ledger) -> "BacktestReport":
        return cls(
            ticks=ticks,
            total_profit=ledger.total_profit,
            win_rate=ledger.win_rate,
            max_drawdown=max_drawdown_pct(ledger.equity_curve),
            profitable_trades=ledger.success_count,
            failed_trades=ledger.failure_count,
            trades=ledger.trades,
        )

    def summary_line(self) -> str:
        return (
            f"Backtest complete over {self.ticks} blocks. "
            f"Total Profit: {format_usd(self.total_profit)}, "
            f"Win Rate: {format_pct(self.win_rate)}, "
            f"Max Drawdown: {format_money(self.max_drawdown, 1)}%"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticks": self.ticks,
            "total_profit": str(self.total_profit),
            "win_rate": str(self.win_rate),
            "max_drawdown": str(self.max_drawdown),
            "profitable_trades": self.profitable_trades,
            "failed_trades": self.failed_trades,
            "trades": [t.to_dict() for t in self.trades],
        }
