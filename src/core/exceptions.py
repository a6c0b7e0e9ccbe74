"""Errors raised by the meter core.

Commands that do not apply to the current phase (starting twice, pausing
while idle) are not errors: the lifecycle reports them by returning False.
Exceptions are reserved for bad input and broken phase invariants.
"""

from typing import Any


class MeterError(Exception):
    code = "meter_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class PermanentError(MeterError):
    """Retrying with the same input cannot succeed."""

    code = "permanent_error"


class ValidationError(PermanentError):
    """Unknown route, zone or sub-destination, or an unsupported modifier value."""

    code = "invalid_input"


class StateError(PermanentError):
    """A phase change outside VALID_TRANSITIONS was attempted."""

    code = "invalid_transition"
