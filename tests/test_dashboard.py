import pytest
from fastapi.testclient import TestClient

from dashboard_pkg.backend import app as app_module
from dashboard_pkg.backend.service import LinkageService

CONFIG = {
    "solver": "analytic",
    "arm": {"first_length": 128.0, "second_length": 128.0, "direction_angle": 0.0},
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "service", LinkageService(config=CONFIG))
    return TestClient(app_module.app)


def test_initial_state(client):
    data = client.get("/api/state").json()
    assert data["target_distance"] == 256.0
    assert data["joints"][2] == pytest.approx([256.0, 0.0])


def test_request_is_clamped(client):
    data = client.post("/api/request", json={"target_distance": 500}).json()
    assert data["target_distance"] == 256.0
    events = client.get("/api/events").json()["events"]
    assert events[-1]["clamped"] is True
    assert events[-1]["message"] == "request"


def test_request_updates_lengths(client):
    data = client.post(
        "/api/request", json={"first_length": 200, "second_length": 50, "target_distance": 10}
    ).json()
    assert data["first_length"] == 200.0
    assert data["target_distance"] == 150.0


def test_request_validation(client):
    assert client.post("/api/request", json={"first_length": -1}).status_code == 422
    assert client.post("/api/request", json={"target_distance": -0.5}).status_code == 422


def test_pointer_tracks(client):
    data = client.post("/api/pointer", json={"x": 0, "y": 100}).json()
    assert data["target_distance"] == pytest.approx(100.0)
    assert data["joints"][2] == pytest.approx([0.0, 100.0], abs=1e-6)


def test_ranges_follow_lengths(client):
    client.post("/api/request", json={"first_length": 10, "second_length": 20})
    ranges = client.get("/api/ranges").json()
    assert ranges["target_distance"] == [0.001, 30.0]
    assert ranges["first_length"] == [0.001, 256.0]


def test_events_limit(client):
    for d in range(5):
        client.post("/api/request", json={"target_distance": 100 + d})
    events = client.get("/api/events", params={"limit": 2}).json()["events"]
    assert len(events) == 2


def test_status(client):
    status = client.get("/api/status").json()
    assert status["solver"] == "analytic"
    assert status["target_mouse"] is False


def test_service_without_default_config(tmp_path, monkeypatch):
    from apps.linkage_runtime import runtime

    monkeypatch.setattr(runtime, "DEFAULT_CONFIG", tmp_path / "absent.yaml")
    service = LinkageService()
    assert service.state().target_distance == 256.0
    assert service.status()["solver"] == "analytic"
