"""
Time utilities for FLASHSIM.

The engine runs on a logical clock: each tick advances simulated time by
a fixed interval, independent of real elapsed time. Wall-clock helpers
are only used for record timestamps.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return now_utc().isoformat()


@dataclass
class LogicalClock:
    """
    Discrete simulation clock in milliseconds.

    Starts at 0 and only moves forward through advance().
    """

    tick_interval_ms: int
    now_ms: int = 0

    def advance(self) -> int:
        """Advance by one tick interval and return the new time."""
        self.now_ms += self.tick_interval_ms
        return self.now_ms

    def is_due(self, deadline_ms: int) -> bool:
        """True once the clock has reached deadline_ms."""
        return self.now_ms >= deadline_ms
