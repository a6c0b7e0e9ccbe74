"""Trip phase state machine and snapshot models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from tariff import rates
from tariff.engine import FareBreakdown
from tariff.models import ModifierSet, TripSelection


class TripPhase(str, Enum):
    """Meter lifecycle phases."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED_PENDING_REVIEW = "stopped_pending_review"

    @property
    def in_flight(self) -> bool:
        return self in (TripPhase.RUNNING, TripPhase.PAUSED)


VALID_TRANSITIONS: dict[TripPhase, set[TripPhase]] = {
    TripPhase.IDLE: {TripPhase.RUNNING},
    TripPhase.RUNNING: {TripPhase.PAUSED, TripPhase.STOPPED_PENDING_REVIEW},
    TripPhase.PAUSED: {TripPhase.RUNNING, TripPhase.STOPPED_PENDING_REVIEW},
    TripPhase.STOPPED_PENDING_REVIEW: {TripPhase.IDLE},
}


class StopKind(str, Enum):
    """Intermediate stop variants and their flat fees."""

    SERVICE = "service"
    DROP_OFF = "drop_off"

    @property
    def fee(self) -> float:
        if self is StopKind.SERVICE:
            return rates.SERVICE_STOP_FEE
        return rates.DROP_OFF_STOP_FEE


class TripState(BaseModel):
    """Read-only view of the meter handed to presentation on every change."""

    model_config = ConfigDict(frozen=True)

    trip_id: str | None = None
    phase: TripPhase = TripPhase.IDLE
    raw_distance_km: float = Field(default=0.0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    waiting_seconds: int = Field(default=0, ge=0)
    fare: float = Field(default=rates.BASE_FARE, ge=0)
    selection: TripSelection = Field(default_factory=TripSelection)
    modifiers: ModifierSet = Field(default_factory=ModifierSet)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stop_count(self) -> int:
        return self.modifiers.stop_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stop_fees(self) -> float:
        return self.modifiers.stop_fees


class TripSummary(BaseModel):
    """Billable record of a finished trip. Created once, never modified."""

    model_config = ConfigDict(frozen=True)

    trip_id: str
    trip_type_label: str
    distance_km: float = Field(ge=0)
    raw_distance_km: float = Field(ge=0)
    waiting_seconds: int = Field(ge=0)
    fare: float = Field(ge=0)
    breakdown: FareBreakdown
    selection: TripSelection
    modifiers: ModifierSet
    stop_count: int = Field(ge=0)
    stop_fees: float = Field(ge=0)
    started_at: datetime | None = None
    completed_at: datetime
