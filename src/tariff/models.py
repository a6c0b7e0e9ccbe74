"""Fare-affecting operator choices: trip selection and surcharge modifiers."""

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from tariff import rates
from tariff.catalog import (
    NORMAL_ROUTE_ID,
    Route,
    RouteKind,
    SubDestination,
    get_route,
    validate_zone,
)


class TripSelection(BaseModel):
    """Route, zone and special-event choices for the current leg."""

    model_config = ConfigDict(frozen=True)

    route_id: str = NORMAL_ROUTE_ID
    sub_destination_id: str | None = None
    zone_fixed: bool = False
    zone: str | None = None
    special_event: bool = False

    @model_validator(mode="after")
    def check_catalog(self) -> Self:
        try:
            route = get_route(self.route_id)
            if self.sub_destination_id is not None:
                if route.kind != RouteKind.MULTI_DESTINATION:
                    raise ValueError(f"Route {route.id!r} has no sub-destinations")
                route.sub_destination(self.sub_destination_id)
            if self.zone is not None:
                validate_zone(self.zone)
        except ValidationError as e:
            raise ValueError(e.message) from e
        return self

    @property
    def route(self) -> Route:
        return get_route(self.route_id)

    @property
    def sub_destination(self) -> SubDestination | None:
        if self.sub_destination_id is None:
            return None
        return self.route.sub_destination(self.sub_destination_id)

    @property
    def zone_selected(self) -> bool:
        """Zone-fixed pricing applies only once a zone has been picked."""
        return self.zone_fixed and self.zone is not None

    @property
    def label(self) -> str:
        sub = self.sub_destination
        return f"{self.route.name} - {sub.name}" if sub else self.route.name


class PetOption(str, Enum):
    CAGED = "caged"
    UNCAGED = "uncaged"

    @property
    def fee(self) -> float:
        return rates.PET_CAGED_FEE if self is PetOption.CAGED else rates.PET_UNCAGED_FEE


class ErrandOption(str, Enum):
    PICKUP_ONLY = "pickup_only"
    PURCHASE_AND_DELIVER = "purchase_and_deliver"

    @property
    def fee(self) -> float:
        if self is ErrandOption.PICKUP_ONLY:
            return rates.ERRAND_PICKUP_ONLY_FEE
        return rates.ERRAND_PURCHASE_FEE


class ExtraPassengers(BaseModel):
    model_config = ConfigDict(frozen=True)

    children: int = Field(default=0, ge=0)
    adults: int = Field(default=0, ge=0)

    @property
    def fee(self) -> float:
        return self.children * rates.EXTRA_CHILD_FEE + self.adults * rates.EXTRA_ADULT_FEE


class ModifierKind(str, Enum):
    PET = "pet"
    ERRAND = "errand"
    EXTRA_PASSENGERS = "extra_passengers"
    EXTRA_SERVICES = "extra_services"


class ModifierSet(BaseModel):
    """Surcharges toggled by the operator plus intermediate-stop totals."""

    model_config = ConfigDict(frozen=True)

    pet: PetOption | None = None
    errand: ErrandOption | None = None
    extra_passengers: ExtraPassengers | None = None
    extra_services: bool = False
    stop_fees: float = Field(default=0.0, ge=0)
    stop_count: int = Field(default=0, ge=0)

    @property
    def pet_fee(self) -> float:
        return self.pet.fee if self.pet else 0.0

    @property
    def errand_fee(self) -> float:
        return self.errand.fee if self.errand else 0.0

    @property
    def extra_passengers_fee(self) -> float:
        return self.extra_passengers.fee if self.extra_passengers else 0.0

    def with_modifier(self, kind: ModifierKind | str, value: Any) -> "ModifierSet":
        """Return a copy with one modifier set; ``None`` switches it off."""
        try:
            kind = ModifierKind(kind)
            if kind is ModifierKind.PET:
                update: dict[str, Any] = {"pet": None if value is None else PetOption(value)}
            elif kind is ModifierKind.ERRAND:
                update = {"errand": None if value is None else ErrandOption(value)}
            elif kind is ModifierKind.EXTRA_PASSENGERS:
                if value is None or isinstance(value, ExtraPassengers):
                    passengers = value
                else:
                    passengers = ExtraPassengers.model_validate(value)
                update = {"extra_passengers": passengers}
            else:
                if not isinstance(value, bool):
                    raise ValueError("extra_services expects a boolean")
                update = {"extra_services": value}
        except (ValueError, PydanticValidationError) as e:
            raise ValidationError(
                f"Invalid value {value!r} for modifier {kind!r}",
                details={"kind": str(kind), "value": repr(value)},
            ) from e
        return self.model_copy(update=update)

    def with_stop(self, fee: float) -> "ModifierSet":
        return self.model_copy(
            update={"stop_fees": self.stop_fees + fee, "stop_count": self.stop_count + 1}
        )
