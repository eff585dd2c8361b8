from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from physiopoint.main import app
from physiopoint.services.session_registry import SessionRegistry, get_session_registry

from conftest import triple_at


@pytest.fixture
def registry(settings):
    return SessionRegistry(settings)


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def frame_body(angle, **extra):
    triple = triple_at(angle)
    body = {
        "proximal": list(triple.proximal.to_tuple()),
        "middle": list(triple.middle.to_tuple()),
        "distal": list(triple.distal.to_tuple()),
    }
    body.update(extra)
    return body


def start(client, name, **extra):
    response = client.post("/api/sessions", json={"exercise_name": name, **extra})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["active_sessions"] == 0

    start(client, "Heel Slides")
    assert client.get("/health").json()["active_sessions"] == 1


def test_list_exercises(client):
    response = client.get("/api/exercises")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == len(data["items"])
    names = [item["name"] for item in data["items"]]
    assert "Heel Slides" in names
    assert "Towel Squeeze" in names


def test_filter_exercises_by_body_area(client):
    data = client.get("/api/exercises", params={"body_area": "hip"}).json()
    assert {item["body_area"] for item in data["items"]} == {"hip"}

    assert client.get("/api/exercises", params={"body_area": "wrist"}).status_code == 422


def test_exercise_detail(client):
    response = client.get(f"/api/exercises/{quote('Elbow Flexion & Extension')}")
    assert response.status_code == 200
    tracking = response.json()["tracking"]
    assert tracking["middle_joint"] == "right_forearm_joint"
    assert tracking["rep_direction"] == "decreasing"
    assert tracking["form_cues"][0]["watched_joint"] == "right_shoulder_1_joint"

    assert client.get("/api/exercises/Cartwheels").status_code == 404


def test_tracked_session_flow(client, registry):
    session = start(client, "Seated Knee Extension", side="left")
    assert session["mode"] == "tracked"
    assert session["camera_hint"] == "Best results: place camera to your side"
    session_id = session["id"]

    for _ in range(5):
        client.post(f"/api/sessions/{session_id}/frames", json=frame_body(90))
    for _ in range(90):
        client.post(f"/api/sessions/{session_id}/frames", json=frame_body(172))
    for _ in range(10):
        response = client.post(f"/api/sessions/{session_id}/frames", json=frame_body(90))

    snapshot = response.json()
    assert response.status_code == 200
    assert snapshot["reps_completed"] == 1
    assert snapshot["zone"] == "below_target"

    state = client.get(f"/api/sessions/{session_id}").json()
    assert state["frames_processed"] == 105

    summary = client.post(f"/api/sessions/{session_id}/finish").json()
    assert summary["reps_completed"] == 1
    assert summary["metrics"]["total_frames"] == 105
    assert summary["events"][0]["kind"] == "good_form_held"
    assert "knee" in summary["feedback"]["journey_message"]

    assert len(registry) == 0
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_missing_positions_are_a_tracking_gap(client):
    session_id = start(client, "Heel Slides")["id"]
    response = client.post(f"/api/sessions/{session_id}/frames", json={})
    assert response.status_code == 200
    assert response.json()["angle"] is None


def test_malformed_position_rejected(client):
    session_id = start(client, "Heel Slides")["id"]
    response = client.post(
        f"/api/sessions/{session_id}/frames",
        json={"proximal": [0, 1], "middle": [0, 0, 0], "distal": [1, 0, 0]}
    )
    assert response.status_code == 422


def test_compensation_through_api(client):
    session_id = start(client, "Wall Slides")["id"]
    client.post(
        f"/api/sessions/{session_id}/frames",
        json=frame_body(30, skeleton={"spine_4_joint": [0.0, 1.2, 0.0]})
    )
    snapshot = client.post(
        f"/api/sessions/{session_id}/frames",
        json=frame_body(30, skeleton={"spine_4_joint": [0.0, 1.2, 0.1]})
    ).json()
    assert snapshot["cue_text"] == "Back stays flat against wall"

    summary = client.post(f"/api/sessions/{session_id}/finish").json()
    assert {"kind": "cheat_detected", "joint_name": "spine_4_joint", "seconds": None} in summary["events"]


def test_reset_and_body_lost(client):
    session_id = start(client, "Heel Slides")["id"]
    for _ in range(3):
        client.post(f"/api/sessions/{session_id}/frames", json=frame_body(150))

    lost = client.post(f"/api/sessions/{session_id}/body-lost").json()
    assert lost["live_message"] == "Move back into frame"

    assert client.post(f"/api/sessions/{session_id}/reset").status_code == 204
    state = client.get(f"/api/sessions/{session_id}").json()
    assert state["frames_processed"] == 0
    assert state["angle"] is None


def test_timer_only_session(client):
    session = start(client, "Towel Squeeze")
    assert session["mode"] == "timer"

    response = client.post(f"/api/sessions/{session['id']}/frames", json=frame_body(90))
    assert response.status_code == 409

    summary = client.post(f"/api/sessions/{session['id']}/finish").json()
    assert summary["mode"] == "timer"
    assert summary["metrics"] is None
    assert summary["feedback"] is None


def test_unknown_exercise_and_session(client):
    assert client.post("/api/sessions", json={"exercise_name": "Cartwheels"}).status_code == 404
    assert client.post("/api/sessions", json={"exercise_name": "Heel Slides", "side": "up"}).status_code == 422
    assert client.post("/api/sessions/nope/frames", json={}).status_code == 404
    assert client.post("/api/sessions/nope/finish").status_code == 404


def test_registry_limit(client, registry):
    registry.settings = registry.settings.model_copy(update={"max_active_sessions": 1})
    start(client, "Heel Slides")
    response = client.post("/api/sessions", json={"exercise_name": "Heel Slides"})
    assert response.status_code == 409


def test_registry_dependency_is_one_shared_instance():
    get_session_registry.cache_clear()
    with TestClient(app):
        assert get_session_registry.cache_info().currsize == 1
        assert get_session_registry() is get_session_registry()
    get_session_registry.cache_clear()
