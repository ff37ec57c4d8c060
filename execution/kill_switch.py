"""
Kill switch and halt bookkeeping.

Halt triggers:
- Manual kill switch (operator)
- Gas exhaustion (tank below the operating threshold while live)
- Operator stop

Only a manual engagement counts as a kill-switch proof; automatic
halts are recorded but do not set the checklist flag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from core.time import now_iso


class HaltReason(str, Enum):
    MANUAL = "MANUAL"
    GAS_EXHAUSTED = "GAS_EXHAUSTED"
    OPERATOR_STOP = "OPERATOR_STOP"


@dataclass
class HaltTrigger:
    """Halt trigger event."""
    timestamp: str
    reason: HaltReason
    block: int = 0
    details: Optional[str] = None


class KillSwitch:
    """
    Records every halt of the live simulation.

    engaged is True from a manual trigger until the next release
    (start-live).
    """

    def __init__(self, history_size: int = 20):
        self._engaged = False
        self._history_size = history_size
        self._triggers: List[HaltTrigger] = []

    @property
    def is_engaged(self) -> bool:
        return self._engaged

    @property
    def triggers(self) -> List[HaltTrigger]:
        return list(self._triggers)

    @property
    def last_trigger(self) -> Optional[HaltTrigger]:
        return self._triggers[-1] if self._triggers else None

    def _record(self, reason: HaltReason, block: int, details: Optional[str]) -> HaltTrigger:
        trigger = HaltTrigger(
            timestamp=now_iso(),
            reason=reason,
            block=block,
            details=details,
        )
        self._triggers.append(trigger)
        del self._triggers[:-self._history_size]
        return trigger

    def manual_trigger(self, block: int = 0, details: Optional[str] = "Manually triggered") -> HaltTrigger:
        """Engage the kill switch."""
        self._engaged = True
        return self._record(HaltReason.MANUAL, block, details)

    def record_halt(self, reason: HaltReason, block: int = 0, details: Optional[str] = None) -> HaltTrigger:
        """Record an automatic or operator halt without engaging."""
        return self._record(reason, block, details)

    def release(self) -> None:
        self._engaged = False

    def get_status(self) -> Dict[str, Any]:
        return {
            "engaged": self._engaged,
            "triggers": [
                {
                    "timestamp": t.timestamp,
                    "reason": t.reason.value,
                    "block": t.block,
                    "details": t.details,
                }
                for t in self._triggers[-5:]
            ],
        }
