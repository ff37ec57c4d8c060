"""
FLASHSIM state machines.

TRADE STATE CONTRACT:
=====================

States (TradeStatus):
  Pending  -> transaction submitted, waiting for its resolve time
  Success  -> settled profitably
  Failed   -> settled as front-run, slippage or unprofitable

Transitions:
  Pending -> Success
  Pending -> Failed

Success and Failed are terminal: a trade is settled exactly once.

BOT STATUS CONTRACT:
====================

  STOPPED     -> LIVE         (start-live)
  LIVE        -> STOPPED      (stop-live, kill switch, gas exhaustion)
  STOPPED     -> BACKTESTING  (run-backtest)
  BACKTESTING -> STOPPED      (backtest complete)

=====================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.constants import BotStatus, FailureReason, TradeStatus
from core.exceptions import InvalidTransitionError
from core.models import Trade


VALID_TRADE_TRANSITIONS: Dict[TradeStatus, List[TradeStatus]] = {
    TradeStatus.PENDING: [TradeStatus.SUCCESS, TradeStatus.FAILED],
    TradeStatus.SUCCESS: [],  # Terminal state
    TradeStatus.FAILED: [],  # Terminal state
}

VALID_STATUS_TRANSITIONS: Dict[BotStatus, List[BotStatus]] = {
    BotStatus.STOPPED: [BotStatus.LIVE, BotStatus.BACKTESTING],
    BotStatus.LIVE: [BotStatus.STOPPED],
    BotStatus.BACKTESTING: [BotStatus.STOPPED],
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: str
    to_state: str
    timestamp: str = ""
    reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_state": self.from_state,
            "to_state": self.to_state,
            "timestamp": self.timestamp,
            "reason": self.reason,
            "metadata": self.metadata,
        }


def settle_trade(
    trade: Trade,
    status: TradeStatus,
    net_profit: Decimal,
    gross_profit: Decimal,
    slippage_cost: Decimal,
    failure_reason: Optional[FailureReason] = None,
) -> StateTransition:
    """
    Move a Pending trade to its terminal state and fill in the outcome.

    Raises:
        InvalidTransitionError: trade already settled, or status is not terminal
    """
    if status not in VALID_TRADE_TRANSITIONS.get(trade.status, []):
        raise InvalidTransitionError(
            f"Cannot transition trade {trade.trade_id} from {trade.status.value} to {status.value}. "
            f"Valid transitions: {[s.value for s in VALID_TRADE_TRANSITIONS.get(trade.status, [])]}",
            details={"trade_id": trade.trade_id},
        )
    if status == TradeStatus.SUCCESS and failure_reason is not None:
        raise InvalidTransitionError(
            "A successful trade cannot carry a failure reason",
            details={"trade_id": trade.trade_id, "failure_reason": failure_reason.value},
        )

    transition = StateTransition(
        from_state=trade.status.value,
        to_state=status.value,
        reason=failure_reason.value if failure_reason else "",
    )
    trade.status = status
    trade.net_profit = net_profit
    trade.gross_profit = gross_profit
    trade.slippage_cost = slippage_cost
    trade.failure_reason = failure_reason
    trade.settled_at = datetime.now(timezone.utc)
    return transition


class StatusMachine:
    """
    Bot status holder with validated transitions and history.
    """

    def __init__(self, initial: BotStatus = BotStatus.STOPPED):
        self._status = initial
        self.history: List[StateTransition] = []

    @property
    def status(self) -> BotStatus:
        return self._status

    @property
    def is_live(self) -> bool:
        return self._status == BotStatus.LIVE

    def can_transition_to(self, target: BotStatus) -> bool:
        return target in VALID_STATUS_TRANSITIONS.get(self._status, [])

    def transition_to(self, target: BotStatus, reason: str = "") -> StateTransition:
        """
        Raises InvalidTransitionError if transition is not valid.
        """
        if not self.can_transition_to(target):
            raise InvalidTransitionError(
                f"Cannot transition from {self._status.value} to {target.value}",
                details={"from": self._status.value, "to": target.value},
            )
        transition = StateTransition(
            from_state=self._status.value,
            to_state=target.value,
            reason=reason,
        )
        self.history.append(transition)
        self._status = target
        return transition

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self._status.value,
            "history": [t.to_dict() for t in self.history[-10:]],
        }
