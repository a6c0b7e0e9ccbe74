"""Fare computation from metering state, selection and modifiers."""

import math

from pydantic import BaseModel, Field

from tariff import rates
from tariff.catalog import RouteKind
from tariff.models import ModifierSet, TripSelection


class FareBreakdown(BaseModel):
    """Detailed breakdown of fare components."""

    zone_fixed: bool
    base_fare: float = Field(ge=0)
    distance_fare: float = Field(ge=0)
    waiting_charge: float = Field(ge=0)
    stop_fees: float = Field(ge=0)
    pet_fee: float = Field(ge=0)
    errand_fee: float = Field(ge=0)
    extra_passengers_fee: float = Field(ge=0)
    trip_type_surcharge: float = Field(ge=0)
    total_fare: float = Field(ge=0)


def waiting_minutes(waiting_seconds: float) -> int:
    """Billable waiting minutes; partial minutes are not charged."""
    return math.floor(waiting_seconds / 60)


def resolve_base_fare(selection: TripSelection) -> float:
    """Base fare for the distance path.

    Sub-destination price, then route price, then the default base; the
    special-event base overrides all of them.
    """
    if selection.special_event:
        return rates.SPECIAL_EVENT_BASE_FARE
    route = selection.route
    sub = selection.sub_destination
    if sub is not None and route.kind == RouteKind.MULTI_DESTINATION:
        return sub.fixed_price
    return route.fixed_price or rates.BASE_FARE


def idle_base_fare(selection: TripSelection) -> float:
    """Fare displayed while no trip is running.

    A chosen sub-destination shows its own price even on special-event
    days; otherwise the special-event base beats the route price.
    """
    sub = selection.sub_destination
    if sub is not None:
        return sub.fixed_price
    if selection.special_event:
        return rates.SPECIAL_EVENT_BASE_FARE
    return selection.route.fixed_price or rates.BASE_FARE


class TariffEngine:
    """Maps metering state and operator choices to a fare.

    Pure: the same inputs always produce the same breakdown, and nothing
    about previous calls is remembered.
    """

    def calculate(
        self,
        distance_km: float,
        waiting_min: int,
        selection: TripSelection,
        modifiers: ModifierSet,
        stop_fees: float = 0.0,
    ) -> FareBreakdown:
        waiting_charge = waiting_min * rates.WAITING_RATE_PER_MINUTE
        pet_fee = modifiers.pet_fee
        errand_fee = modifiers.errand_fee
        passengers_fee = modifiers.extra_passengers_fee

        if selection.zone_selected:
            total = (
                stop_fees
                + rates.ZONE_FIXED_FARE
                + waiting_charge
                + pet_fee
                + errand_fee
                + passengers_fee
            )
            return FareBreakdown(
                zone_fixed=True,
                base_fare=rates.ZONE_FIXED_FARE,
                distance_fare=rates.ZONE_FIXED_FARE,
                waiting_charge=waiting_charge,
                stop_fees=stop_fees,
                pet_fee=pet_fee,
                errand_fee=errand_fee,
                extra_passengers_fee=passengers_fee,
                trip_type_surcharge=0.0,
                total_fare=total,
            )

        base_fare = resolve_base_fare(selection)
        fare = self.distance_fare(distance_km, base_fare)

        surcharge = 0.0
        not_normal = selection.route.kind != RouteKind.NORMAL or (
            selection.zone_fixed and selection.zone is None
        )
        if not_normal and distance_km >= rates.TRIP_TYPE_SURCHARGE_MIN_KM:
            surcharge = rates.TRIP_TYPE_SURCHARGE

        total = (
            stop_fees + fare + waiting_charge + pet_fee + errand_fee + passengers_fee + surcharge
        )
        return FareBreakdown(
            zone_fixed=False,
            base_fare=base_fare,
            distance_fare=fare,
            waiting_charge=waiting_charge,
            stop_fees=stop_fees,
            pet_fee=pet_fee,
            errand_fee=errand_fee,
            extra_passengers_fee=passengers_fee,
            trip_type_surcharge=surcharge,
            total_fare=total,
        )

    def compute_fare(
        self,
        distance_km: float,
        waiting_min: int,
        selection: TripSelection,
        modifiers: ModifierSet,
        stop_fees: float = 0.0,
    ) -> float:
        return self.calculate(
            distance_km, waiting_min, selection, modifiers, stop_fees
        ).total_fare

    @staticmethod
    def distance_fare(distance_km: float, base_fare: float) -> float:
        """Tier price re-applied as an offset from the default base fare.

        Distances falling between two tiers (e.g. 3.995 km) match none and
        are charged the base fare alone.
        """
        for tier in rates.DISTANCE_TIERS:
            if not tier.contains(distance_km):
                continue
            if tier.open_ended and distance_km > tier.min_km:
                extra_km = distance_km - tier.min_km
                return (tier.price - rates.BASE_FARE) + base_fare + extra_km * tier.extra_rate_per_km
            return base_fare + (tier.price - rates.BASE_FARE)
        return base_fare
