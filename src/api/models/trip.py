from typing import Any

from pydantic import BaseModel

from tariff import rates
from tariff.catalog import Route
from tariff.models import ErrandOption, PetOption
from trip import StopKind


class ControlResponse(BaseModel):
    status: str
    message: str | None = None


class StopRequest(BaseModel):
    kind: StopKind


class ModifierRequest(BaseModel):
    """New modifier value; ``null`` switches the modifier off."""

    value: Any = None


class TierRate(BaseModel):
    min_km: float
    max_km: float | None  # None for the open-ended top tier
    price: float
    extra_rate_per_km: float = 0.0


class RateTable(BaseModel):
    """Tariff reference shown to the operator alongside the catalog."""

    base_fare: float
    special_event_base_fare: float
    zone_fixed_fare: float
    waiting_rate_per_minute: float
    trip_type_surcharge: float
    trip_type_surcharge_min_km: float
    distance_tiers: list[TierRate]
    stop_fees: dict[str, float]
    pet_fees: dict[str, float]
    errand_fees: dict[str, float]
    extra_passenger_fees: dict[str, float]

    @classmethod
    def current(cls) -> "RateTable":
        return cls(
            base_fare=rates.BASE_FARE,
            special_event_base_fare=rates.SPECIAL_EVENT_BASE_FARE,
            zone_fixed_fare=rates.ZONE_FIXED_FARE,
            waiting_rate_per_minute=rates.WAITING_RATE_PER_MINUTE,
            trip_type_surcharge=rates.TRIP_TYPE_SURCHARGE,
            trip_type_surcharge_min_km=rates.TRIP_TYPE_SURCHARGE_MIN_KM,
            distance_tiers=[
                TierRate(
                    min_km=tier.min_km,
                    max_km=None if tier.open_ended else tier.max_km,
                    price=tier.price,
                    extra_rate_per_km=tier.extra_rate_per_km,
                )
                for tier in rates.DISTANCE_TIERS
            ],
            stop_fees={kind.value: kind.fee for kind in StopKind},
            pet_fees={option.value: option.fee for option in PetOption},
            errand_fees={option.value: option.fee for option in ErrandOption},
            extra_passenger_fees={
                "child": rates.EXTRA_CHILD_FEE,
                "adult": rates.EXTRA_ADULT_FEE,
            },
        )


class CatalogResponse(BaseModel):
    routes: list[Route]
    zones: list[str]
    rates: RateTable
