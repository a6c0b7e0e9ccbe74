import logging

NO_CORRELATION = "-"


class DefaultCorrelationFilter(logging.Filter):
    """Guarantees ``correlation_id`` so text formats can always reference it."""

    def __init__(self, placeholder: str = NO_CORRELATION) -> None:
        super().__init__()
        self.placeholder = placeholder

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.setdefault("correlation_id", self.placeholder)
        return True
