"""Record formatters: one JSON object per line, or a compact console line."""

import json
import logging
from datetime import UTC, datetime

# Attributes copied from the record when the logging context provided them
CONTEXT_FIELDS = ("trip_id", "phase", "correlation_id")


class JSONFormatter(logging.Formatter):
    def __init__(self, environment: str = "development") -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, UTC)
        payload: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "env": self.environment,
        }
        payload.update(
            (name, record.__dict__[name]) for name in CONTEXT_FIELDS if name in record.__dict__
        )
        if record.levelno >= logging.WARNING:
            payload["source"] = f"{record.module}:{record.lineno}"
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class DevFormatter(logging.Formatter):
    """Console output, e.g. ``14:02:11.385 INFO    trips.lifecycle (3f2a9c1e-...) Trip paused``."""

    FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s (%(correlation_id)s) %(message)s"

    def __init__(self) -> None:
        super().__init__(fmt=self.FORMAT, datefmt="%H:%M:%S")
