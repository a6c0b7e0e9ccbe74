"""Accrual clock for paused (waiting) time."""

import math
from collections.abc import Callable


class WaitingClock:
    """Accumulates waiting time in whole seconds across pause intervals.

    ``now`` is the time source in seconds; the meter engine passes the
    simpy environment clock so ticks and accrual share one timeline.
    """

    def __init__(self, now: Callable[[], float]) -> None:
        self._now = now
        self._prior_total = 0
        self._started_at: float | None = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def prior_total(self) -> int:
        return self._prior_total

    @property
    def elapsed_seconds(self) -> int:
        """Live waiting duration: folded total plus the running interval."""
        return self._prior_total + self._interval_seconds()

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._now()

    def stop(self) -> None:
        if self._started_at is None:
            return
        self._prior_total += self._interval_seconds()
        self._started_at = None

    def reset_total(self) -> None:
        self._prior_total = 0
        if self._started_at is not None:
            self._started_at = self._now()

    def _interval_seconds(self) -> int:
        if self._started_at is None:
            return 0
        # Clock time is a float sum of steps; round off drift before flooring
        return max(0, math.floor(round(self._now() - self._started_at, 6)))
