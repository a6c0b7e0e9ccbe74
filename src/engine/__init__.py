"""Meter engine: owns the simpy clock and serializes every command.

The trip lifecycle, its waiting tick and the synthetic fix stream all live
on one ``simpy.Environment``. The engine thread advances that environment in
small paced steps and, between steps, drains the commands queued by the
HTTP layer through the ``ThreadCoordinator``.
"""

import logging
import time
from typing import Any

import simpy

from engine.thread_coordinator import (
    Command,
    CommandTimeoutError,
    CommandType,
    NoHandlerRegisteredError,
    ShutdownError,
    ThreadCoordinator,
)
from geo.fix import Fix
from geo.gps_simulation import GPSSimulator, SyntheticFixSource
from geo.location_feed import LocationFeed
from metering.distance_accumulator import DistanceAccumulator
from settings import Settings
from tariff.models import TripSelection
from trip import TripState, TripSummary
from trips.lifecycle import TripLifecycle

__all__ = [
    "Command",
    "CommandTimeoutError",
    "CommandType",
    "MeterEngine",
    "NoHandlerRegisteredError",
    "ShutdownError",
    "ThreadCoordinator",
]

logger = logging.getLogger(__name__)


class MeterEngine:
    """Single owner of the trip lifecycle and its event sources."""

    def __init__(
        self,
        env: simpy.Environment,
        lifecycle: TripLifecycle,
        device_feed: LocationFeed,
        synthetic_source: SyntheticFixSource,
        coordinator: ThreadCoordinator,
        realtime: bool = True,
    ) -> None:
        self._env = env
        self._lifecycle = lifecycle
        self._device_feed = device_feed
        self._synthetic_source = synthetic_source
        self._coordinator = coordinator
        self._realtime = realtime
        self._simulating = False
        self._register_handlers()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        coordinator: ThreadCoordinator | None = None,
        realtime: bool = True,
    ) -> "MeterEngine":
        """Wire a complete engine from configuration."""
        env = simpy.Environment()
        meter = settings.meter
        sim = settings.simulator
        feed = LocationFeed()
        lifecycle = TripLifecycle(
            env=env,
            fix_source=feed,
            accumulator=DistanceAccumulator(
                noise_threshold_m=meter.noise_threshold_m,
                rebate_per_km=meter.rebate_per_km,
                correction_factor=meter.gps_correction_factor,
            ),
            waiting_tick_seconds=meter.waiting_tick_seconds,
        )
        fallback_origin = Fix(
            latitude=sim.origin_latitude, longitude=sim.origin_longitude, timestamp=0.0
        )
        synthetic = SyntheticFixSource(
            env=env,
            origin=lambda: feed.latest_fix or fallback_origin,
            step_m=sim.step_m,
            interval_seconds=sim.interval_seconds,
            bearing_deg=sim.bearing_deg,
            gps=GPSSimulator(noise_meters=sim.noise_meters),
        )
        coordinator = coordinator or ThreadCoordinator(
            timeout=settings.api.command_timeout_seconds
        )
        return cls(env, lifecycle, feed, synthetic, coordinator, realtime=realtime)

    @property
    def env(self) -> simpy.Environment:
        return self._env

    @property
    def lifecycle(self) -> TripLifecycle:
        return self._lifecycle

    @property
    def device_feed(self) -> LocationFeed:
        return self._device_feed

    @property
    def coordinator(self) -> ThreadCoordinator:
        return self._coordinator

    @property
    def simulating(self) -> bool:
        return self._simulating

    def step(self, seconds: float) -> None:
        """Drain pending commands, then advance simulated time."""
        self._coordinator.process_pending_commands()

        target_time = self._env.now + seconds
        if not self._realtime:
            self._env.run(until=target_time)
            return

        start_wall = time.perf_counter()
        start_sim = self._env.now
        self._env.run(until=target_time)

        elapsed_wall = time.perf_counter() - start_wall
        sleep_time = (self._env.now - start_sim) - elapsed_wall
        if sleep_time > 0.001:
            time.sleep(sleep_time)

    def observe_device_fix(self, fix: Fix) -> None:
        """Hand a device fix to the feed; ignored by the meter while simulating."""
        self._device_feed.push(fix)

    def start_simulation(self) -> bool:
        if self._simulating:
            return False
        self._lifecycle.switch_fix_source(self._synthetic_source)
        self._simulating = True
        logger.info(
            "Synthetic fixes enabled (%.0f m every %.1f s)",
            self._synthetic_source.step_m,
            self._synthetic_source.interval_seconds,
        )
        return True

    def stop_simulation(self) -> bool:
        if not self._simulating:
            return False
        self._lifecycle.switch_fix_source(self._device_feed)
        self._simulating = False
        logger.info("Synthetic fixes disabled, back to device feed")
        return True

    def snapshot(self) -> TripState:
        return self._lifecycle.snapshot()

    def summary(self) -> TripSummary | None:
        return self._lifecycle.summary

    def shutdown(self) -> None:
        self._lifecycle.shutdown()
        self._coordinator.shutdown()
        logger.info("Meter engine shut down")

    def _register_handlers(self) -> None:
        lifecycle = self._lifecycle
        handlers = {
            CommandType.START: lambda p: lifecycle.start(),
            CommandType.PAUSE: lambda p: lifecycle.pause(),
            CommandType.RESUME: lambda p: lifecycle.resume(),
            CommandType.TOGGLE_PAUSE: lambda p: lifecycle.toggle_pause(),
            CommandType.RECORD_STOP: lambda p: lifecycle.record_intermediate_stop(p["kind"]),
            CommandType.STOP: lambda p: lifecycle.stop(),
            CommandType.ACKNOWLEDGE_SUMMARY: lambda p: lifecycle.acknowledge_summary(),
            CommandType.SET_SELECTION: self._handle_set_selection,
            CommandType.SET_MODIFIER: lambda p: lifecycle.set_modifier(p["kind"], p.get("value")),
            CommandType.OBSERVE_FIX: lambda p: self.observe_device_fix(p["fix"]),
            CommandType.START_SIMULATION: lambda p: self.start_simulation(),
            CommandType.STOP_SIMULATION: lambda p: self.stop_simulation(),
            CommandType.GET_SNAPSHOT: lambda p: self.snapshot(),
            CommandType.GET_SUMMARY: lambda p: self.summary(),
            CommandType.SHUTDOWN: lambda p: self.shutdown(),
        }
        for command_type, handler in handlers.items():
            self._coordinator.register_handler(command_type, handler)

    def _handle_set_selection(self, payload: dict[str, Any]) -> bool:
        selection = payload["selection"]
        if not isinstance(selection, TripSelection):
            selection = TripSelection.model_validate(selection)
        return self._lifecycle.set_trip_selection(selection)
