"""Trip lifecycle: the state machine that owns metering for one trip.

All mutation goes through the public operations below. Fare is never
stored; every snapshot recomputes it from distance, waiting time,
selection and modifiers, so no change can leave a stale amount behind.

Commands that are not valid from the current phase are ignored and return
False. The lifecycle is not thread-safe: the meter engine calls it only
from its own thread (see engine.MeterEngine).
"""

import logging
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import simpy

from core.exceptions import StateError
from geo.fix import Fix
from geo.location_feed import FixSource, LocationWatch
from meter_logging import log_trip_context
from metering.distance_accumulator import DistanceAccumulator
from metering.waiting_clock import WaitingClock
from tariff.engine import FareBreakdown, TariffEngine, idle_base_fare, waiting_minutes
from tariff.models import ModifierKind, ModifierSet, TripSelection
from trip import VALID_TRANSITIONS, StopKind, TripPhase, TripState, TripSummary

logger = logging.getLogger(__name__)

StateListener = Callable[[TripState], None]
SummaryListener = Callable[[TripSummary], None]


class TripLifecycle:
    """Start/pause/resume/stop state machine for the trip in flight."""

    def __init__(
        self,
        env: simpy.Environment,
        fix_source: FixSource | None = None,
        accumulator: DistanceAccumulator | None = None,
        tariff: TariffEngine | None = None,
        waiting_tick_seconds: float = 1.0,
    ) -> None:
        self._env = env
        self._fix_source = fix_source
        self._accumulator = accumulator or DistanceAccumulator()
        self._tariff = tariff or TariffEngine()
        self._clock = WaitingClock(now=lambda: self._env.now)
        self._waiting_tick_seconds = waiting_tick_seconds

        self._phase = TripPhase.IDLE
        self._trip_id: str | None = None
        self._started_at: datetime | None = None
        self._selection = TripSelection()
        self._modifiers = ModifierSet()
        self._waiting_seconds = 0
        self._current_fix: Fix | None = None
        self._summary: TripSummary | None = None

        self._tick_process: simpy.Process | None = None
        self._watch: LocationWatch | None = None

        self._state_listeners: list[StateListener] = []
        self._summary_listeners: list[SummaryListener] = []

    @property
    def phase(self) -> TripPhase:
        return self._phase

    @property
    def trip_id(self) -> str | None:
        return self._trip_id

    @property
    def selection(self) -> TripSelection:
        return self._selection

    @property
    def modifiers(self) -> ModifierSet:
        return self._modifiers

    @property
    def summary(self) -> TripSummary | None:
        return self._summary

    @property
    def fix_source(self) -> FixSource | None:
        return self._fix_source

    @property
    def current_fix(self) -> Fix | None:
        """Most recent fix seen, from the lifecycle itself or its source."""
        if self._current_fix is not None:
            return self._current_fix
        return self._fix_source.latest_fix if self._fix_source else None

    @property
    def watching(self) -> bool:
        return self._watch is not None and self._watch.active

    @property
    def waiting_tick_active(self) -> bool:
        return self._tick_process is not None and self._tick_process.is_alive

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def add_summary_listener(self, listener: SummaryListener) -> None:
        self._summary_listeners.append(listener)

    def snapshot(self) -> TripState:
        return TripState(
            trip_id=self._trip_id,
            phase=self._phase,
            raw_distance_km=self._accumulator.raw_distance_km,
            distance_km=self._accumulator.adjusted_distance_km,
            waiting_seconds=self._waiting_seconds,
            fare=self.fare,
            selection=self._selection,
            modifiers=self._modifiers,
        )

    @property
    def fare(self) -> float:
        if self._phase.in_flight:
            return self.fare_breakdown().total_fare
        return idle_base_fare(self._selection)

    def fare_breakdown(self) -> FareBreakdown:
        return self._tariff.calculate(
            self._accumulator.adjusted_distance_km,
            waiting_minutes(self._waiting_seconds),
            self._selection,
            self._modifiers,
            self._modifiers.stop_fees,
        )

    # Inbound: location subsystem

    def observe_fix(self, fix: Fix) -> bool:
        """Record a fix; while running, integrate it into trip distance.

        Returns True when the fix added distance (and the fare changed).
        """
        self._current_fix = fix
        if self._phase != TripPhase.RUNNING:
            return False

        if not self._accumulator.observe(fix):
            return False
        self._publish()
        return True

    def switch_fix_source(self, source: FixSource | None) -> None:
        """Replace where fixes come from, never running two at once.

        The baseline is cleared so the jump between the old and new
        streams is not metered.
        """
        self._cancel_watch()
        self._fix_source = source
        if self._phase.in_flight:
            self._accumulator.clear_baseline()
            self._begin_watch()

    # Inbound: operator commands

    def start(self) -> bool:
        if self._phase != TripPhase.IDLE:
            return self._ignored("start")
        if self.current_fix is None:
            logger.warning("Cannot start trip: no current GPS fix")
            return False

        self._trip_id = str(uuid4())
        self._started_at = datetime.now(UTC)
        self._accumulator.reset()
        self._clock.stop()
        self._clock.reset_total()
        self._waiting_seconds = 0
        self._transition(TripPhase.RUNNING)
        self._begin_watch()

        with log_trip_context(self._trip_id, self._phase.value):
            logger.info("Trip started (%s)", self._selection.label)
        self._publish()
        return True

    def pause(self) -> bool:
        if self._phase != TripPhase.RUNNING:
            return self._ignored("pause")

        self._clock.start()
        self._transition(TripPhase.PAUSED)
        self._tick_process = self._env.process(self._waiting_tick_process())

        with log_trip_context(self._trip_id, self._phase.value):
            logger.info("Trip paused, waiting time accruing")
        self._publish()
        return True

    def resume(self) -> bool:
        if self._phase != TripPhase.PAUSED:
            return self._ignored("resume")

        self._cancel_tick()
        self._clock.stop()
        self._waiting_seconds = self._clock.elapsed_seconds
        self._transition(TripPhase.RUNNING)

        with log_trip_context(self._trip_id, self._phase.value):
            logger.info("Trip resumed after %ds total waiting", self._waiting_seconds)
        self._publish()
        return True

    def toggle_pause(self) -> bool:
        if self._phase == TripPhase.PAUSED:
            return self.resume()
        return self.pause()

    def record_intermediate_stop(self, kind: StopKind | str) -> bool:
        """Bill a stop fee and restart waiting-time accrual from zero.

        Waiting accrued before the stop is settled by the stop fee, so it is
        dropped rather than carried into the next leg. The trip continues
        in the running phase.
        """
        if not self._phase.in_flight:
            return self._ignored("record_intermediate_stop")
        if not self._modifiers.extra_services:
            return self._ignored("record_intermediate_stop (extra services disabled)")

        kind = StopKind(kind)
        self._modifiers = self._modifiers.with_stop(kind.fee)
        self._cancel_tick()
        self._clock.stop()
        self._clock.reset_total()
        self._waiting_seconds = 0
        if self._phase == TripPhase.PAUSED:
            self._transition(TripPhase.RUNNING)

        with log_trip_context(self._trip_id, self._phase.value):
            logger.info(
                "Intermediate %s stop #%d (+%.2f)",
                kind.value,
                self._modifiers.stop_count,
                kind.fee,
            )
        self._publish()
        return True

    def stop(self) -> bool:
        if not self._phase.in_flight:
            return self._ignored("stop")

        self._cancel_tick()
        self._cancel_watch()
        self._clock.stop()
        self._waiting_seconds = self._clock.elapsed_seconds

        breakdown = self.fare_breakdown()
        trip_id = self._trip_id or str(uuid4())
        summary = TripSummary(
            trip_id=trip_id,
            trip_type_label=self._selection.label,
            distance_km=self._accumulator.adjusted_distance_km,
            raw_distance_km=self._accumulator.raw_distance_km,
            waiting_seconds=self._waiting_seconds,
            fare=breakdown.total_fare,
            breakdown=breakdown,
            selection=self._selection,
            modifiers=self._modifiers,
            stop_count=self._modifiers.stop_count,
            stop_fees=self._modifiers.stop_fees,
            started_at=self._started_at,
            completed_at=datetime.now(UTC),
        )
        self._summary = summary

        self._accumulator.reset()
        self._clock.reset_total()
        self._waiting_seconds = 0
        self._modifiers = ModifierSet()
        self._selection = self._selection.model_copy(
            update={"zone_fixed": False, "zone": None, "special_event": False}
        )
        self._transition(TripPhase.STOPPED_PENDING_REVIEW)
        self._trip_id = None
        self._started_at = None

        with log_trip_context(trip_id, self._phase.value):
            logger.info(
                "Trip stopped: %.3f km, %ds waiting, fare %.2f",
                summary.distance_km,
                summary.waiting_seconds,
                summary.fare,
            )
        for listener in self._summary_listeners:
            listener(summary)
        self._publish()
        return True

    def acknowledge_summary(self) -> bool:
        if self._phase != TripPhase.STOPPED_PENDING_REVIEW:
            return self._ignored("acknowledge_summary")

        self._summary = None
        self._waiting_seconds = 0
        self._transition(TripPhase.IDLE)
        self._publish()
        return True

    def set_trip_selection(self, selection: TripSelection) -> bool:
        self._selection = selection
        logger.debug("Trip selection set to %s", selection.label)
        self._publish()
        return True

    def set_modifier(self, kind: ModifierKind | str, value: Any) -> bool:
        """Toggle one surcharge; raises ValidationError for unknown values."""
        self._modifiers = self._modifiers.with_modifier(kind, value)
        logger.debug("Modifier %s set to %r", kind, value)
        self._publish()
        return True

    # Waiting tick

    def tick(self) -> bool:
        """Refresh live waiting time and fare; only meaningful while paused."""
        if self._phase != TripPhase.PAUSED:
            return False
        self._waiting_seconds = self._clock.elapsed_seconds
        self._publish()
        return True

    def _waiting_tick_process(self) -> Generator[simpy.Event, Any, None]:
        this = self._env.active_process
        try:
            # A cancel issued from inside tick() cannot interrupt this process;
            # it drops the handle and the loop exits at the next wakeup
            while self._tick_process is this:
                yield self._env.timeout(self._waiting_tick_seconds)
                if self._tick_process is not this:
                    return
                self.tick()
        except simpy.Interrupt:
            pass

    def _cancel_tick(self) -> None:
        process = self._tick_process
        self._tick_process = None
        if process is not None and process.is_alive and process is not self._env.active_process:
            process.interrupt("cancelled")

    def shutdown(self) -> None:
        """Release timers and location watches. Safe to call repeatedly."""
        self._cancel_tick()
        self._cancel_watch()

    # Internals

    def _begin_watch(self) -> None:
        if self._fix_source is not None:
            self._watch = self._fix_source.watch(self.observe_fix)

    def _cancel_watch(self) -> None:
        watch = self._watch
        self._watch = None
        if watch is not None:
            watch.cancel()

    def _transition(self, new_phase: TripPhase) -> None:
        if new_phase not in VALID_TRANSITIONS[self._phase]:
            raise StateError(
                f"Invalid transition from {self._phase.value} to {new_phase.value}",
                details={"from": self._phase.value, "to": new_phase.value},
            )
        self._phase = new_phase

    def _ignored(self, command: str) -> bool:
        logger.debug("Ignoring %s in phase %s", command, self._phase.value)
        return False

    def _publish(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for listener in self._state_listeners:
            listener(snapshot)
