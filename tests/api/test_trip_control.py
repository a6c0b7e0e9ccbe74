import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from engine import MeterEngine
from main import MeterRunner
from settings import Settings

FIX = {"latitude": 19.7047, "longitude": -103.4617, "timestamp": 0}


@pytest.fixture
def engine():
    return MeterEngine.from_settings(Settings())


@pytest.fixture
def test_client(engine):
    runner = MeterRunner(engine, step_seconds=0.02)
    runner.start()
    app = create_app(coordinator=engine.coordinator, settings=Settings())
    with TestClient(app) as client:
        yield client
    runner.stop()


@pytest.fixture
def started(test_client):
    assert test_client.post("/trip/fixes", json=FIX).status_code == 200
    assert test_client.post("/trip/start").status_code == 200
    return test_client


@pytest.mark.unit
def test_health(test_client):
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
def test_idle_state(test_client):
    response = test_client.get("/trip/state")

    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "idle"
    assert body["fare"] == 50.0
    assert body["stop_count"] == 0


@pytest.mark.unit
def test_start_without_fix_conflicts(test_client):
    response = test_client.post("/trip/start")

    assert response.status_code == 409
    assert "idle" in response.json()["detail"]


@pytest.mark.unit
def test_start_with_fix(started):
    assert started.get("/trip/state").json()["phase"] == "running"


@pytest.mark.unit
def test_pause_resume(started):
    response = started.post("/trip/pause")
    assert response.status_code == 200
    assert response.json()["status"] == "paused"

    assert started.post("/trip/pause").status_code == 409
    assert started.post("/trip/resume").json()["status"] == "running"


@pytest.mark.unit
def test_toggle_pause_reports_new_phase(started):
    assert started.post("/trip/toggle-pause").json()["status"] == "paused"
    assert started.post("/trip/toggle-pause").json()["status"] == "running"


@pytest.mark.unit
def test_stop_summary_acknowledge(started):
    assert started.get("/trip/summary").status_code == 404

    response = started.post("/trip/stop")
    assert response.status_code == 200
    assert response.json()["status"] == "stopped_pending_review"

    summary = started.get("/trip/summary").json()
    assert summary["trip_type_label"] == "Normal trip"
    assert summary["fare"] == summary["breakdown"]["total_fare"]

    assert started.post("/trip/stop").status_code == 409
    assert started.post("/trip/acknowledge").json()["status"] == "idle"
    assert started.get("/trip/summary").status_code == 404


@pytest.mark.unit
def test_stops_require_extra_services(started):
    assert started.post("/trip/stops", json={"kind": "service"}).status_code == 409

    started.put("/trip/modifiers/extra_services", json={"value": True})
    response = started.post("/trip/stops", json={"kind": "service"})

    assert response.status_code == 200
    state = started.get("/trip/state").json()
    assert state["stop_fees"] == 50.0
    assert state["stop_count"] == 1


@pytest.mark.unit
def test_unknown_stop_kind(started):
    assert started.post("/trip/stops", json={"kind": "detour"}).status_code == 422


@pytest.mark.unit
def test_set_selection(test_client):
    response = test_client.put("/trip/selection", json={"route_id": "tecnologico"})

    assert response.status_code == 200
    assert response.json()["fare"] == 70.0
    assert response.json()["selection"]["route_id"] == "tecnologico"


@pytest.mark.unit
def test_set_selection_outside_catalog(test_client):
    response = test_client.put("/trip/selection", json={"zone_fixed": True, "zone": "Mars"})
    assert response.status_code == 422


@pytest.mark.unit
def test_set_modifier(started):
    response = started.put("/trip/modifiers/pet", json={"value": "caged"})

    assert response.status_code == 200
    assert response.json()["fare"] == 70.0


@pytest.mark.unit
def test_set_modifier_invalid_value(started):
    response = started.put("/trip/modifiers/pet", json={"value": "llama"})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "invalid_input"


@pytest.mark.unit
def test_set_unknown_modifier(started):
    assert started.put("/trip/modifiers/sunroof", json={"value": True}).status_code == 422


@pytest.mark.unit
def test_fix_out_of_range(test_client):
    response = test_client.post("/trip/fixes", json={"latitude": 95, "longitude": 0})
    assert response.status_code == 422


@pytest.mark.unit
def test_fixes_meter_distance(started):
    for i in range(1, 11):
        started.post(
            "/trip/fixes", json={"latitude": 19.7047 + i * 0.001, "longitude": -103.4617}
        )

    state = started.get("/trip/state").json()
    assert state["raw_distance_km"] > 1.0
    assert state["distance_km"] <= state["raw_distance_km"]


@pytest.mark.unit
def test_simulation_toggle(test_client):
    assert test_client.post("/trip/simulation/start").json()["status"] == "simulating"
    assert test_client.post("/trip/simulation/start").status_code == 409
    assert test_client.post("/trip/simulation/stop").json()["status"] == "device_feed"


@pytest.mark.unit
def test_catalog(test_client):
    body = test_client.get("/trip/catalog").json()

    assert [route["id"] for route in body["routes"]] == [
        "normal",
        "walmart",
        "tecnologico",
        "cristo-rey",
    ]
    assert "Las Lomas" in body["zones"]


@pytest.mark.unit
def test_catalog_includes_rate_table(test_client):
    rates = test_client.get("/trip/catalog").json()["rates"]

    assert rates["base_fare"] == 50.0
    assert rates["waiting_rate_per_minute"] == 3.0
    assert rates["stop_fees"] == {"service": 50.0, "drop_off": 10.0}
    assert rates["pet_fees"] == {"caged": 20.0, "uncaged": 30.0}
    assert rates["errand_fees"] == {"pickup_only": 10.0, "purchase_and_deliver": 20.0}
    top_tier = rates["distance_tiers"][-1]
    assert top_tier["min_km"] == 8.0
    assert top_tier["max_km"] is None
    assert top_tier["extra_rate_per_km"] == 16.0
    assert len(rates["distance_tiers"]) == 6
