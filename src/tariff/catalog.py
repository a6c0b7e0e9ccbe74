"""Route and service-zone catalog offered to the operator."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ValidationError


class RouteKind(str, Enum):
    """How a route prices its base fare."""

    NORMAL = "normal"
    FIXED_ROUTE = "fixed_route"
    MULTI_DESTINATION = "multi_destination"


class SubDestination(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    fixed_price: float = Field(ge=0)


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    kind: RouteKind
    fixed_price: float | None = None
    distance_km: float | None = None
    sub_destinations: tuple[SubDestination, ...] = ()

    def sub_destination(self, sub_destination_id: str) -> SubDestination:
        for sub in self.sub_destinations:
            if sub.id == sub_destination_id:
                return sub
        raise ValidationError(
            f"Unknown sub-destination {sub_destination_id!r} for route {self.id!r}",
            details={"route_id": self.id, "sub_destination_id": sub_destination_id},
        )


NORMAL_ROUTE_ID = "normal"

ROUTES: tuple[Route, ...] = (
    Route(
        id=NORMAL_ROUTE_ID,
        name="Normal trip",
        description="Fare by distance travelled",
        kind=RouteKind.NORMAL,
    ),
    Route(
        id="walmart",
        name="To Walmart",
        description="Downtown to Walmart Ciudad Guzman",
        kind=RouteKind.FIXED_ROUTE,
        fixed_price=60.0,
        distance_km=5.2,
    ),
    Route(
        id="tecnologico",
        name="To Tecnologico",
        description="Downtown to Tecnologico de Ciudad Guzman",
        kind=RouteKind.FIXED_ROUTE,
        fixed_price=70.0,
        distance_km=5.9,
    ),
    Route(
        id="cristo-rey",
        name="Cristo Rey",
        description="Downtown to Cristo Rey",
        kind=RouteKind.MULTI_DESTINATION,
        sub_destinations=(
            SubDestination(id="cano", name="Cano", fixed_price=60.0),
            SubDestination(id="mitad", name="Mitad", fixed_price=70.0),
            SubDestination(id="arriba", name="Arriba", fixed_price=80.0),
        ),
    ),
)

SERVICE_ZONES: tuple[str, ...] = tuple(
    sorted(
        [
            "Americas",
            "Col. San Jose",
            "Emiliano Zapata",
            "Las Garzas",
            "Las Lomas",
            "Pueblos de Jalisco",
            "Valle de Zapotlan",
        ]
    )
)

_ROUTES_BY_ID = {route.id: route for route in ROUTES}


def get_route(route_id: str) -> Route:
    try:
        return _ROUTES_BY_ID[route_id]
    except KeyError:
        raise ValidationError(
            f"Unknown route {route_id!r}", details={"route_id": route_id}
        ) from None


def validate_zone(zone: str) -> str:
    if zone not in SERVICE_ZONES:
        raise ValidationError(f"Unknown service zone {zone!r}", details={"zone": zone})
    return zone
