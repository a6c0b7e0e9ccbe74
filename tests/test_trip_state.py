import pytest

from tariff.models import ModifierSet
from trip import VALID_TRANSITIONS, StopKind, TripPhase, TripState


@pytest.mark.unit
class TestTripPhase:
    def test_in_flight(self):
        assert TripPhase.RUNNING.in_flight
        assert TripPhase.PAUSED.in_flight
        assert not TripPhase.IDLE.in_flight
        assert not TripPhase.STOPPED_PENDING_REVIEW.in_flight

    def test_valid_transitions(self):
        assert VALID_TRANSITIONS[TripPhase.IDLE] == {TripPhase.RUNNING}
        assert TripPhase.PAUSED in VALID_TRANSITIONS[TripPhase.RUNNING]
        assert TripPhase.RUNNING in VALID_TRANSITIONS[TripPhase.PAUSED]
        assert VALID_TRANSITIONS[TripPhase.STOPPED_PENDING_REVIEW] == {TripPhase.IDLE}

    def test_summary_must_be_acknowledged_before_new_trip(self):
        assert TripPhase.RUNNING not in VALID_TRANSITIONS[TripPhase.STOPPED_PENDING_REVIEW]


@pytest.mark.unit
class TestStopKind:
    def test_fees(self):
        assert StopKind.SERVICE.fee == 50.0
        assert StopKind.DROP_OFF.fee == 10.0

    def test_from_value(self):
        assert StopKind("drop_off") is StopKind.DROP_OFF


@pytest.mark.unit
class TestTripState:
    def test_idle_defaults(self):
        state = TripState()
        assert state.phase == TripPhase.IDLE
        assert state.fare == 50.0
        assert state.distance_km == 0.0
        assert state.stop_count == 0

    def test_stop_totals_come_from_modifiers(self):
        state = TripState(modifiers=ModifierSet().with_stop(50.0).with_stop(10.0))
        assert state.stop_count == 2
        assert state.stop_fees == 60.0

    def test_serializes_stop_totals(self):
        dumped = TripState(modifiers=ModifierSet().with_stop(10.0)).model_dump(mode="json")
        assert dumped["stop_count"] == 1
        assert dumped["stop_fees"] == 10.0
        assert dumped["phase"] == "idle"
