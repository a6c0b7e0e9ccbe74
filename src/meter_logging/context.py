"""Per-thread fields stamped onto every log record.

The meter engine thread tags its records with the trip in flight; HTTP
worker threads never see those fields because each thread starts from an
empty context.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_fields: ContextVar[dict[str, Any]] = ContextVar("meter_log_fields", default={})


class LogContext:
    """Access to the fields of the current thread's logging context."""

    @staticmethod
    def set(**fields: Any) -> None:
        _fields.set({**_fields.get(), **fields})

    @staticmethod
    def get() -> dict[str, Any]:
        return dict(_fields.get())

    @staticmethod
    def clear() -> None:
        _fields.set({})


class ContextFilter(logging.Filter):
    """Copies context fields onto a record unless the call site passed them in ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in _fields.get().items():
            record.__dict__.setdefault(name, value)
        return True


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add fields for the duration of the block; the outer fields come back on exit."""
    token = _fields.set({**_fields.get(), **fields})
    try:
        yield
    finally:
        _fields.reset(token)


@contextmanager
def log_trip_context(trip_id: str | None, phase: str | None = None) -> Iterator[None]:
    """Tag records with the trip id, which doubles as the correlation id.

    Outside a trip (``trip_id`` is None) the block runs untagged.
    """
    if trip_id is None:
        yield
        return

    fields: dict[str, Any] = {"trip_id": trip_id, "correlation_id": trip_id}
    if phase is not None:
        fields["phase"] = phase
    with log_context(**fields):
        yield
