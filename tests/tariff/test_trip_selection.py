import pytest
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from tariff.catalog import ROUTES, SERVICE_ZONES, RouteKind, get_route, validate_zone
from tariff.models import (
    ErrandOption,
    ExtraPassengers,
    ModifierKind,
    ModifierSet,
    PetOption,
    TripSelection,
)


@pytest.mark.unit
class TestCatalog:
    def test_routes(self):
        ids = [route.id for route in ROUTES]
        assert ids == ["normal", "walmart", "tecnologico", "cristo-rey"]

    def test_fixed_routes(self):
        walmart = get_route("walmart")
        assert walmart.kind == RouteKind.FIXED_ROUTE
        assert walmart.fixed_price == 60.0
        assert walmart.distance_km == 5.2

    def test_multi_destination(self):
        cristo_rey = get_route("cristo-rey")
        prices = {sub.id: sub.fixed_price for sub in cristo_rey.sub_destinations}
        assert prices == {"cano": 60.0, "mitad": 70.0, "arriba": 80.0}

    def test_unknown_route(self):
        with pytest.raises(ValidationError) as exc_info:
            get_route("airport")
        assert exc_info.value.details == {"route_id": "airport"}

    def test_unknown_sub_destination(self):
        with pytest.raises(ValidationError):
            get_route("cristo-rey").sub_destination("summit")

    def test_zones_are_sorted(self):
        assert list(SERVICE_ZONES) == sorted(SERVICE_ZONES)
        assert len(SERVICE_ZONES) == 7

    def test_validate_zone(self):
        assert validate_zone("Las Garzas") == "Las Garzas"
        with pytest.raises(ValidationError):
            validate_zone("Downtown")


@pytest.mark.unit
class TestTripSelection:
    def test_defaults_to_normal(self):
        selection = TripSelection()
        assert selection.route.kind == RouteKind.NORMAL
        assert not selection.zone_selected
        assert selection.label == "Normal trip"

    def test_label_includes_sub_destination(self):
        selection = TripSelection(route_id="cristo-rey", sub_destination_id="cano")
        assert selection.label == "Cristo Rey - Cano"

    def test_zone_selected_requires_flag_and_zone(self):
        assert TripSelection(zone_fixed=True, zone="Las Lomas").zone_selected
        assert not TripSelection(zone_fixed=True).zone_selected
        assert not TripSelection(zone="Las Lomas").zone_selected

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"route_id": "airport"},
            {"route_id": "cristo-rey", "sub_destination_id": "summit"},
            {"route_id": "walmart", "sub_destination_id": "cano"},
            {"zone_fixed": True, "zone": "Nowhere"},
        ],
    )
    def test_rejects_values_outside_catalog(self, kwargs):
        with pytest.raises(PydanticValidationError):
            TripSelection(**kwargs)

    def test_is_immutable(self):
        selection = TripSelection()
        with pytest.raises(PydanticValidationError):
            selection.special_event = True


@pytest.mark.unit
class TestModifierSet:
    def test_defaults_are_free(self):
        modifiers = ModifierSet()
        assert modifiers.pet_fee == 0.0
        assert modifiers.errand_fee == 0.0
        assert modifiers.extra_passengers_fee == 0.0
        assert not modifiers.extra_services

    def test_with_modifier_returns_new_set(self):
        original = ModifierSet()
        updated = original.with_modifier(ModifierKind.PET, "caged")

        assert original.pet is None
        assert updated.pet is PetOption.CAGED
        assert updated.pet_fee == 20.0

    def test_none_switches_off(self):
        modifiers = ModifierSet(errand=ErrandOption.PICKUP_ONLY)
        assert modifiers.with_modifier("errand", None).errand is None

    def test_extra_passengers_from_mapping(self):
        modifiers = ModifierSet().with_modifier("extra_passengers", {"children": 2, "adults": 3})
        assert modifiers.extra_passengers == ExtraPassengers(children=2, adults=3)
        assert modifiers.extra_passengers_fee == 80.0

    def test_extra_services_flag(self):
        assert ModifierSet().with_modifier("extra_services", True).extra_services

    @pytest.mark.parametrize(
        ("kind", "value"),
        [
            ("pet", "dragon"),
            ("errand", 3),
            ("extra_passengers", {"children": -1}),
            ("extra_services", "yes"),
            ("sunroof", True),
        ],
    )
    def test_invalid_values_raise(self, kind, value):
        with pytest.raises(ValidationError):
            ModifierSet().with_modifier(kind, value)

    def test_with_stop_accumulates(self):
        modifiers = ModifierSet().with_stop(50.0).with_stop(10.0)
        assert modifiers.stop_fees == 60.0
        assert modifiers.stop_count == 2
