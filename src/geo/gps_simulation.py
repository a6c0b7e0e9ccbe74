import logging
import math
import random
from collections.abc import Callable, Generator
from typing import Any

import simpy

from geo.distance import EARTH_RADIUS_M
from geo.fix import Fix
from geo.location_feed import FixCallback

logger = logging.getLogger(__name__)


class GPSSimulator:
    def __init__(self, noise_meters: float = 0.0):
        self.noise_meters = noise_meters

    def add_noise(
        self, lat: float, lon: float, max_noise_meters: float = 15.0
    ) -> tuple[float, float]:
        if self.noise_meters == 0:
            return lat, lon

        # Generate Gaussian noise and clamp to max value
        noise_lat = max(
            -max_noise_meters, min(max_noise_meters, random.gauss(0, self.noise_meters))
        )
        noise_lon = max(
            -max_noise_meters, min(max_noise_meters, random.gauss(0, self.noise_meters))
        )

        lat_offset = noise_lat / 111000
        lon_offset = noise_lon / (111000 * math.cos(math.radians(lat)))

        return lat + lat_offset, lon + lon_offset


def destination_point(
    lat: float, lon: float, distance_m: float, bearing_deg: float
) -> tuple[float, float]:
    """Point reached travelling ``distance_m`` from (lat, lon) along a bearing.

    Spherical model; longitude is normalized to [-180, 180).
    """
    angular = distance_m / EARTH_RADIUS_M
    bearing = math.radians(bearing_deg)
    lat1 = math.radians(lat)
    lon1 = math.radians(lon)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )

    lon2_deg = (math.degrees(lon2) + 540) % 360 - 180
    return math.degrees(lat2), lon2_deg


class SyntheticWatch:
    """Running synthetic fix stream; cancel interrupts the simpy process.

    Cancelling from inside the stream's own callback only marks the watch;
    the process sees the mark and exits before emitting again.
    """

    def __init__(
        self,
        env: simpy.Environment,
        run: Callable[["SyntheticWatch"], Generator[simpy.Event, Any, None]],
    ) -> None:
        self._env = env
        self._cancelled = False
        self._process = env.process(run(self))

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not self._cancelled and self._process.is_alive

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._process.is_alive and self._process is not self._env.active_process:
            self._process.interrupt("cancelled")


class SyntheticFixSource:
    """Fixed-rate fix generator for demonstrations and testing.

    Each interval the position advances ``step_m`` along ``bearing_deg``.
    Drop-in replacement for the device feed: same ``watch`` interface.
    """

    def __init__(
        self,
        env: simpy.Environment,
        origin: Callable[[], Fix | None],
        step_m: float = 100.0,
        interval_seconds: float = 1.0,
        bearing_deg: float = 0.0,
        gps: GPSSimulator | None = None,
    ) -> None:
        self.env = env
        self._origin = origin
        self.step_m = step_m
        self.interval_seconds = interval_seconds
        self.bearing_deg = bearing_deg
        self._gps = gps or GPSSimulator()
        self._latest_fix: Fix | None = None

    @property
    def latest_fix(self) -> Fix | None:
        return self._latest_fix or self._origin()

    def watch(self, callback: FixCallback) -> SyntheticWatch:
        return SyntheticWatch(self.env, lambda handle: self._emit_process(callback, handle))

    def _emit_process(
        self, callback: FixCallback, handle: SyntheticWatch
    ) -> Generator[simpy.Event, Any, None]:
        start = self.latest_fix
        if start is None:
            logger.warning("Synthetic fix source has no origin, not emitting")
            return
        lat, lon = start.coords
        try:
            while not handle.cancelled:
                yield self.env.timeout(self.interval_seconds)
                if handle.cancelled:
                    return
                lat, lon = destination_point(lat, lon, self.step_m, self.bearing_deg)
                noisy_lat, noisy_lon = self._gps.add_noise(lat, lon)
                fix = Fix(latitude=noisy_lat, longitude=noisy_lon, timestamp=self.env.now)
                self._latest_fix = fix
                callback(fix)
        except simpy.Interrupt:
            pass
