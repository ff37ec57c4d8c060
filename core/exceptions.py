"""
Typed exceptions for FLASHSIM.

Modeled trade outcomes (front-run, slippage, unprofitable) are NOT
exceptions; they are recorded on the Trade. These classes cover misuse of
the API and broken configuration only.
"""

from typing import Optional

from core.constants import ErrorCode


class SimulatorError(Exception):
    """Base exception for FLASHSIM."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(SimulatorError):
    """Configuration is missing or invalid."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.CONFIG_INVALID, details)


class PoolError(SimulatorError):
    """Pool lookup or reserve validation failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.POOL_NOT_FOUND,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


class InvalidTransitionError(SimulatorError):
    """Raised when an invalid trade state transition is attempted."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INVALID_TRANSITION, details)


class SinglePendingViolation(SimulatorError):
    """A transaction was submitted while another one is in flight."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.PENDING_SLOT_OCCUPIED, details)


class CommandRejected(SimulatorError):
    """Operator command is not allowed in the current status."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.COMMAND_REJECTED, details)
