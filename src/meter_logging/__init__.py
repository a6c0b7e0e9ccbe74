from meter_logging.context import ContextFilter, LogContext, log_context, log_trip_context
from meter_logging.filters import DefaultCorrelationFilter
from meter_logging.formatters import DevFormatter, JSONFormatter
from meter_logging.setup import setup_logging

__all__ = [
    "ContextFilter",
    "DefaultCorrelationFilter",
    "DevFormatter",
    "JSONFormatter",
    "LogContext",
    "log_context",
    "log_trip_context",
    "setup_logging",
]
