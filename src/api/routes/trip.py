from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_coordinator
from api.models.trip import (
    CatalogResponse,
    ControlResponse,
    ModifierRequest,
    RateTable,
    StopRequest,
)
from core.exceptions import ValidationError
from engine.thread_coordinator import CommandTimeoutError, CommandType, ShutdownError
from geo.fix import Fix
from tariff.catalog import ROUTES, SERVICE_ZONES
from tariff.models import ModifierKind, TripSelection
from trip import TripState, TripSummary

router = APIRouter()

CoordinatorDep = Annotated[Any, Depends(get_coordinator)]


def _send(
    coordinator: Any, command_type: CommandType, payload: dict[str, Any] | None = None
) -> Any:
    try:
        return coordinator.send_command(command_type, payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict()) from e
    except CommandTimeoutError as e:
        raise HTTPException(status_code=503, detail="Meter engine did not respond") from e
    except ShutdownError as e:
        raise HTTPException(status_code=503, detail="Meter engine is shutting down") from e


def _control(
    coordinator: Any,
    command_type: CommandType,
    status: str,
    payload: dict[str, Any] | None = None,
) -> ControlResponse:
    if not _send(coordinator, command_type, payload):
        state: TripState = _send(coordinator, CommandType.GET_SNAPSHOT)
        raise HTTPException(
            status_code=409,
            detail=f"Command {command_type.value} rejected in phase {state.phase.value}",
        )
    return ControlResponse(status=status)


@router.post("/start", response_model=ControlResponse)
def start_trip(coordinator: CoordinatorDep) -> ControlResponse:
    """Start metering. Requires a current GPS fix."""
    return _control(coordinator, CommandType.START, "running")


@router.post("/pause", response_model=ControlResponse)
def pause_trip(coordinator: CoordinatorDep) -> ControlResponse:
    return _control(coordinator, CommandType.PAUSE, "paused")


@router.post("/resume", response_model=ControlResponse)
def resume_trip(coordinator: CoordinatorDep) -> ControlResponse:
    return _control(coordinator, CommandType.RESUME, "running")


@router.post("/toggle-pause", response_model=ControlResponse)
def toggle_pause(coordinator: CoordinatorDep) -> ControlResponse:
    response = _control(coordinator, CommandType.TOGGLE_PAUSE, "toggled")
    state: TripState = _send(coordinator, CommandType.GET_SNAPSHOT)
    response.status = state.phase.value
    return response


@router.post("/stops", response_model=ControlResponse)
def record_stop(request: StopRequest, coordinator: CoordinatorDep) -> ControlResponse:
    """Bill an intermediate stop. Only accepted with extra services enabled."""
    response = _control(
        coordinator, CommandType.RECORD_STOP, "stop_recorded", {"kind": request.kind}
    )
    response.message = f"{request.kind.value} stop (+{request.kind.fee:.2f})"
    return response


@router.post("/stop", response_model=ControlResponse)
def stop_trip(coordinator: CoordinatorDep) -> ControlResponse:
    return _control(coordinator, CommandType.STOP, "stopped_pending_review")


@router.post("/acknowledge", response_model=ControlResponse)
def acknowledge_summary(coordinator: CoordinatorDep) -> ControlResponse:
    """Dismiss the trip summary and return the meter to idle."""
    return _control(coordinator, CommandType.ACKNOWLEDGE_SUMMARY, "idle")


@router.put("/selection", response_model=TripState)
def set_selection(selection: TripSelection, coordinator: CoordinatorDep) -> TripState:
    _send(coordinator, CommandType.SET_SELECTION, {"selection": selection})
    state: TripState = _send(coordinator, CommandType.GET_SNAPSHOT)
    return state


@router.put("/modifiers/{kind}", response_model=TripState)
def set_modifier(
    kind: ModifierKind, request: ModifierRequest, coordinator: CoordinatorDep
) -> TripState:
    _send(coordinator, CommandType.SET_MODIFIER, {"kind": kind, "value": request.value})
    state: TripState = _send(coordinator, CommandType.GET_SNAPSHOT)
    return state


@router.post("/fixes", response_model=ControlResponse)
def observe_fix(fix: Fix, coordinator: CoordinatorDep) -> ControlResponse:
    """Feed one device GPS fix into the meter."""
    _send(coordinator, CommandType.OBSERVE_FIX, {"fix": fix})
    return ControlResponse(status="accepted")


@router.post("/simulation/start", response_model=ControlResponse)
def start_simulation(coordinator: CoordinatorDep) -> ControlResponse:
    """Replace the device feed with synthetic fixes."""
    return _control(coordinator, CommandType.START_SIMULATION, "simulating")


@router.post("/simulation/stop", response_model=ControlResponse)
def stop_simulation(coordinator: CoordinatorDep) -> ControlResponse:
    return _control(coordinator, CommandType.STOP_SIMULATION, "device_feed")


@router.get("/state", response_model=TripState)
def get_state(coordinator: CoordinatorDep) -> TripState:
    state: TripState = _send(coordinator, CommandType.GET_SNAPSHOT)
    return state


@router.get("/summary", response_model=TripSummary)
def get_summary(coordinator: CoordinatorDep) -> TripSummary:
    """Summary of the last finished trip, until it is acknowledged."""
    summary: TripSummary | None = _send(coordinator, CommandType.GET_SUMMARY)
    if summary is None:
        raise HTTPException(status_code=404, detail="No trip summary pending review")
    return summary


@router.get("/catalog", response_model=CatalogResponse)
def get_catalog() -> CatalogResponse:
    """Routes, service zones and the rate table; static, so no engine round trip."""
    return CatalogResponse(
        routes=list(ROUTES), zones=list(SERVICE_ZONES), rates=RateTable.current()
    )
