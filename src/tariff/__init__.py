from tariff.engine import FareBreakdown, TariffEngine, idle_base_fare, waiting_minutes
from tariff.models import (
    ErrandOption,
    ExtraPassengers,
    ModifierKind,
    ModifierSet,
    PetOption,
    TripSelection,
)

__all__ = [
    "ErrandOption",
    "ExtraPassengers",
    "FareBreakdown",
    "ModifierKind",
    "ModifierSet",
    "PetOption",
    "TariffEngine",
    "TripSelection",
    "idle_base_fare",
    "waiting_minutes",
]
