"""State endpoint tests: GET/POST /api/state."""

import json

from src.tracker import actions
from src.tracker.persistence import RemoteStateStore


def test_first_read_creates_default_file(client, state_path):
    assert not state_path.exists()
    resp = client.get("/api/state")
    assert resp.status_code == 200
    data = resp.json()
    assert data["projects"] == []
    assert data["preferences"]["theme"] == "dark"
    assert data["selectedProjectId"] is None
    assert state_path.exists()


def test_save_then_read(client):
    body = {
        "projects": [{"id": "p1", "name": "Rocket", "phases": []}],
        "preferences": {"showNotes": False, "showFiles": True, "showChecklist": True, "theme": "light"},
        "selectedProjectId": "p1",
        "selectedPhaseId": None,
    }
    resp = client.post("/api/state", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get("/api/state").json() == body


def test_non_object_body_rejected(client, state_path):
    resp = client.post("/api/state", json=[1, 2, 3])
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert not state_path.exists()


def test_invalid_json_rejected(client):
    resp = client.post(
        "/api/state",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Expected a JSON object body"}


def test_projects_not_a_list_stored_as_empty(client):
    client.post("/api/state", json={"projects": "not-an-array"})
    assert client.get("/api/state").json()["projects"] == []


def test_missing_project_ids_assigned(client):
    client.post("/api/state", json={"projects": [{"name": "No id"}, {"id": "keep", "name": "Has id"}]})
    projects = client.get("/api/state").json()["projects"]
    assert projects[0]["id"]
    assert projects[1]["id"] == "keep"


def test_bad_preferences_fall_back_to_defaults(client):
    client.post("/api/state", json={"projects": [], "preferences": "loud"})
    prefs = client.get("/api/state").json()["preferences"]
    assert prefs == {"showNotes": True, "showFiles": True, "showChecklist": True, "theme": "dark"}


def test_corrupt_file_served_as_default(client, state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text("{oops", encoding="utf-8")
    resp = client.get("/api/state")
    assert resp.status_code == 200
    assert resp.json()["projects"] == []
    assert state_path.read_text(encoding="utf-8") == "{oops"


def test_write_failure_returns_500(client, tmp_path, monkeypatch):
    from services.api.app import db

    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    monkeypatch.setattr(db, "STATE_FILE", str(blocker / "state.json"))
    resp = client.post("/api/state", json={"projects": []})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Could not save state"}


def test_unhandled_error_returns_generic_500(client, monkeypatch):
    from services.api.app import db

    def boom():
        raise RuntimeError("kaboom")

    monkeypatch.setattr(db, "read_state", boom)
    resp = client.get("/api/state")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Something went wrong while processing the request."}
    # the server keeps serving
    assert client.get("/health").status_code == 200


def test_remote_store_round_trip(client, state_path):
    store = RemoteStateStore("http://testserver", session=client)
    state = store.load()
    project = actions.create_project(state, "Rocket", type="physical")
    actions.add_phase(project, "Build")
    store.save(state)

    on_disk = json.loads(state_path.read_text(encoding="utf-8"))
    assert on_disk["projects"][0]["name"] == "Rocket"
    assert on_disk["projects"][0]["phases"][0]["name"] == "Build"

    reloaded = store.load()
    assert reloaded.projects[0].id == project.id
    assert reloaded.selected_project_id == project.id
