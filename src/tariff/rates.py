"""Tariff constants. Amounts are in local currency units."""

from dataclasses import dataclass

BASE_FARE = 50.0
SPECIAL_EVENT_BASE_FARE = 60.0
ZONE_FIXED_FARE = 70.0
WAITING_RATE_PER_MINUTE = 3.0

# Non-normal trips pay a flat extra once they pass this distance
TRIP_TYPE_SURCHARGE = 5.0
TRIP_TYPE_SURCHARGE_MIN_KM = 3.7

SERVICE_STOP_FEE = 50.0
DROP_OFF_STOP_FEE = 10.0

PET_CAGED_FEE = 20.0
PET_UNCAGED_FEE = 30.0
ERRAND_PICKUP_ONLY_FEE = 10.0
ERRAND_PURCHASE_FEE = 20.0
EXTRA_CHILD_FEE = 10.0
EXTRA_ADULT_FEE = 20.0


@dataclass(frozen=True)
class DistanceTier:
    """Distance bracket, inclusive on both bounds.

    ``price`` is quoted against BASE_FARE: only its difference from the
    default base is added on top of whichever base fare is active.
    """

    min_km: float
    max_km: float
    price: float
    extra_rate_per_km: float = 0.0

    @property
    def open_ended(self) -> bool:
        return self.max_km == float("inf")

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km <= self.max_km


DISTANCE_TIERS: tuple[DistanceTier, ...] = (
    DistanceTier(0.0, 3.99, 50.0),
    DistanceTier(4.0, 4.99, 55.0),
    DistanceTier(5.0, 5.99, 60.0),
    DistanceTier(6.0, 6.99, 65.0),
    DistanceTier(7.0, 7.99, 70.0),
    DistanceTier(8.0, float("inf"), 80.0, extra_rate_per_km=16.0),
)
