"""
monitoring/events.py - Operator event log.

Every state transition of the simulation is narrated here as a LogEntry
{timestamp, message, severity}. Entries are:
- kept in a bounded buffer (oldest dropped first)
- mirrored to the Python logger with structured context
- pushed to any subscribed callbacks (UI, CLI printer)
"""

import logging
from collections import deque
from typing import Callable, Deque, List

from core.constants import MAX_LOG_ENTRIES, Severity
from core.logging import get_logger
from core.models import LogEntry

EventCallback = Callable[[LogEntry], None]

SEVERITY_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class EventLog:
    """Bounded, subscribable event sink."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES, logger_name: str = "flashsim.events"):
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)
        self._subscribers: List[EventCallback] = []
        self._next_id = 1
        self._logger = get_logger(logger_name)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LogEntry]:
        """Retained entries, oldest first."""
        return list(self._entries)

    def subscribe(self, callback: EventCallback) -> None:
        self._subscribers.append(callback)

    def emit(self, message: str, severity: Severity = Severity.INFO, block: int = 0) -> LogEntry:
        entry = LogEntry(
            entry_id=self._next_id,
            message=message,
            severity=severity,
            block=block,
        )
        self._next_id += 1
        self._entries.append(entry)

        self._logger.log(
            SEVERITY_LEVELS[severity],
            message,
            extra={"context": {"severity": severity.value, "block": block}},
        )
        for callback in list(self._subscribers):
            callback(entry)
        return entry

    def info(self, message: str, block: int = 0) -> LogEntry:
        return self.emit(message, Severity.INFO, block)

    def success(self, message: str, block: int = 0) -> LogEntry:
        return self.emit(message, Severity.SUCCESS, block)

    def warning(self, message: str, block: int = 0) -> LogEntry:
        return self.emit(message, Severity.WARNING, block)

    def error(self, message: str, block: int = 0) -> LogEntry:
        return self.emit(message, Severity.ERROR, block)

    def clear(self) -> None:
        self._entries.clear()

    def to_list(self) -> List[dict]:
        return [e.to_dict() for e in self._entries]
