"""Root logger configuration for the meter process."""

import logging
import sys
from typing import TextIO

from meter_logging.context import ContextFilter
from meter_logging.filters import DefaultCorrelationFilter
from meter_logging.formatters import DevFormatter, JSONFormatter

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def build_handler(
    json_output: bool,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())
    # Order matters: the trip context must set correlation_id before the placeholder does
    handler.addFilter(ContextFilter())
    handler.addFilter(DefaultCorrelationFilter())
    return handler


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> None:
    """Replace every root handler with a single meter handler.

    Calling this again reconfigures in place; handlers never accumulate.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(build_handler(json_output, environment, stream))
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
