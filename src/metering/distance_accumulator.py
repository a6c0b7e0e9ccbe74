"""Cumulative trip distance from a sequence of accepted fixes."""

import logging
import math

from geo.distance import GPS_CORRECTION_FACTOR, geodesic_distance_m
from geo.fix import Fix

logger = logging.getLogger(__name__)

NOISE_THRESHOLD_M = 15.0
REBATE_PER_KM = 0.125


class DistanceAccumulator:
    """Integrates geodesic distance between fixes, ignoring GPS jitter.

    The baseline is the last fix that produced accepted movement. Fixes
    within the noise threshold of the baseline are dropped without moving
    the baseline, so slow drift while parked never adds up to distance.
    """

    def __init__(
        self,
        noise_threshold_m: float = NOISE_THRESHOLD_M,
        rebate_per_km: float = REBATE_PER_KM,
        correction_factor: float = GPS_CORRECTION_FACTOR,
    ) -> None:
        self.noise_threshold_m = noise_threshold_m
        self.rebate_per_km = rebate_per_km
        self.correction_factor = correction_factor
        self._raw_distance_km = 0.0
        self._baseline: Fix | None = None

    @property
    def raw_distance_km(self) -> float:
        return self._raw_distance_km

    @property
    def adjusted_distance_km(self) -> float:
        """Raw distance minus the per-completed-kilometer rebate."""
        return adjusted_distance(self._raw_distance_km, self.rebate_per_km)

    @property
    def baseline(self) -> Fix | None:
        return self._baseline

    def observe(self, fix: Fix) -> bool:
        """Feed one fix. Returns True when it added distance."""
        if self._baseline is None:
            self._baseline = fix
            return False

        segment_m = geodesic_distance_m(self._baseline, fix, self.correction_factor)
        if segment_m <= self.noise_threshold_m:
            logger.debug("Discarded fix %.1fm from baseline (noise)", segment_m)
            return False

        self._raw_distance_km += segment_m / 1000
        self._baseline = fix
        return True

    def clear_baseline(self) -> None:
        self._baseline = None

    def reset(self) -> None:
        self._raw_distance_km = 0.0
        self._baseline = None


def adjusted_distance(raw_distance_km: float, rebate_per_km: float = REBATE_PER_KM) -> float:
    completed_km = math.floor(raw_distance_km)
    discount = completed_km * rebate_per_km
    return max(0.0, raw_distance_km - discount)
