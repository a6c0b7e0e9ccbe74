from core.exceptions import MeterError, PermanentError, StateError, ValidationError

__all__ = [
    "MeterError",
    "PermanentError",
    "StateError",
    "ValidationError",
]
