"""
core/logging.py - Structured logging for the simulator.

Every record carries:
- timestamp (ISO 8601, UTC)
- level
- logger
- message
- block (simulated chain head, when the record has one)
- context (severity, trade_id, route, ...)

Contextual fields are passed only via extra={"context": {...}}. The
"block" key is lifted out of the context so operator events line up
with the block they happened in.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Added to every JSON record (service name, seed, ...)
_global_context: dict[str, Any] = {}


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return dict(context) if context else {}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {
        "timestamp": "2026-01-04T12:00:00.000+00:00",
        "level": "INFO",
        "logger": "flashsim.events",
        "message": "New block mined: 19845322. Congestion: 50%.",
        "block": 19845322,
        "context": {"severity": "info", "service": "flashsim"}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        context = {**_global_context, **_record_context(record)}

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if "block" in context:
            entry["block"] = context.pop("block")

        if record.exc_info:
            context["exception"] = self.formatException(record.exc_info)
        if context:
            entry["context"] = context

        # Decimal and Enum values fall back to str()
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line human-readable output:

        12:00:00 | INFO     | flashsim.events | #19845322 New block mined ... | severity=info
    """

    max_fields = 3

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        block = context.pop("block", None)

        message = record.getMessage()
        if block is not None:
            message = f"#{block} {message}"
        line = f"{datetime.now():%H:%M:%S} | {record.levelname:<8} | {record.name} | {message}"

        if context:
            shown = list(context.items())[: self.max_fields]
            line += " | " + ", ".join(f"{k}={v}" for k, v in shown)
            if len(context) > self.max_fields:
                line += f", ... (+{len(context) - self.max_fields} more)"
        return line


class ContextAdapter(logging.LoggerAdapter):
    """Merges the adapter's default context with per-call context."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        call_context = kwargs.get("extra", {}).get("context", {})
        kwargs["extra"] = {"context": {**self.extra, **call_context}}
        return msg, kwargs


def set_global_context(**kwargs: Any) -> None:
    """
    Add fields to every JSON record.

    Example:
        set_global_context(service="flashsim", seed=42)
    """
    _global_context.update(kwargs)


def clear_global_context() -> None:
    _global_context.clear()


def get_logger(name: str, **context: Any) -> ContextAdapter:
    """
    Logger with optional default context.

    Example:
        logger = get_logger("flashsim.lifecycle", route="spatial")
        logger.info("Submitted", extra={"context": {"trade_id": "0xabc"}})
    """
    return ContextAdapter(logging.getLogger(name), context)


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: str | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_output: JSON lines on stdout instead of console lines
        log_file: optional file that always receives JSON lines
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)
