"""Tests for src.tracker.normalize -- state repair and defaults.

Covers empty/garbage roots, collection repair, id generation,
enumeration coercion, progress clamping, the status/percent invariant
and idempotence.
"""

import copy

import pytest

from src.tracker.models import COLOR_PALETTE, TrackerState
from src.tracker.normalize import create_state, load_state, normalize_state


MESSY_STATE = {
    "projects": [
        {
            "name": "Rocket",
            "type": "hardware",
            "phases": [
                {
                    "id": "p1",
                    "progress": 140,
                    "tasks": [
                        {"id": "t1", "title": "A", "status": "done", "percentComplete": 20},
                        {"id": "t1", "title": "B", "percentComplete": "100"},
                        {"title": "C", "status": "weird", "priority": "urgent"},
                        "not a task",
                    ],
                    "notes": "nope",
                    "checklist": [{"text": "Check cables", "done": 1}],
                },
                {"id": "p1", "name": "", "progress": -20},
            ],
            "share": True,
        },
        {"id": "x", "name": "Website", "type": "physical", "files": None},
        42,
    ],
    "preferences": {"theme": "neon", "showNotes": 0, "compact": True},
    "selectedProjectId": 7,
}


# ===================================================================
# Root handling
# ===================================================================

class TestRoot:

    @pytest.mark.parametrize("raw", [None, [], "state", 12, True])
    def test_non_object_root_gives_fresh_state(self, raw):
        assert normalize_state(raw) == create_state()

    def test_empty_object_gets_every_key(self):
        result = normalize_state({})
        assert result["projects"] == []
        assert result["preferences"]["theme"] == "dark"
        assert result["selectedProjectId"] is None
        assert result["selectedPhaseId"] is None

    def test_projects_not_a_list(self):
        assert normalize_state({"projects": "not-an-array"})["projects"] == []

    def test_input_is_not_mutated(self):
        raw = copy.deepcopy(MESSY_STATE)
        normalize_state(raw)
        assert raw == MESSY_STATE


# ===================================================================
# Collections & ids
# ===================================================================

class TestCollections:

    def test_non_dict_entries_dropped(self):
        result = normalize_state(MESSY_STATE)
        assert len(result["projects"]) == 2
        assert len(result["projects"][0]["phases"][0]["tasks"]) == 3

    def test_non_list_collections_become_empty(self):
        project = normalize_state(MESSY_STATE)["projects"][0]
        assert project["phases"][0]["notes"] == []
        assert project["bom"] == []
        assert normalize_state(MESSY_STATE)["projects"][1]["files"] == []

    def test_missing_ids_are_generated(self):
        project = normalize_state(MESSY_STATE)["projects"][0]
        assert project["id"]
        assert all(task["id"] for task in project["phases"][0]["tasks"])

    def test_duplicate_ids_are_replaced(self):
        project = normalize_state(MESSY_STATE)["projects"][0]
        task_ids = [task["id"] for task in project["phases"][0]["tasks"]]
        phase_ids = [phase["id"] for phase in project["phases"]]
        assert task_ids[0] == "t1"
        assert len(set(task_ids)) == 3
        assert phase_ids[0] == "p1"
        assert len(set(phase_ids)) == 2

    def test_existing_ids_kept(self):
        assert normalize_state(MESSY_STATE)["projects"][1]["id"] == "x"


# ===================================================================
# Scalars
# ===================================================================

class TestScalars:

    def test_unknown_project_type_defaults_to_digital(self):
        projects = normalize_state(MESSY_STATE)["projects"]
        assert projects[0]["type"] == "digital"
        assert projects[1]["type"] == "physical"

    def test_progress_clamped(self):
        phases = normalize_state(MESSY_STATE)["projects"][0]["phases"]
        assert phases[0]["progress"] == 100
        assert phases[1]["progress"] == 0

    def test_numeric_string_progress(self):
        phase = normalize_state({"projects": [{"phases": [{"progress": "40"}]}]})["projects"][0]["phases"][0]
        assert phase["progress"] == 40

    def test_infinite_quantity_falls_back_to_default(self):
        raw = {"projects": [
            {"id": "p1", "name": "Rocket", "bom": [{"name": "bolt", "quantity": "inf"}, {"name": "nut", "quantity": 1e400}]},
            {"id": "p2", "name": "Website"},
        ]}
        projects = normalize_state(raw)["projects"]
        assert [p["name"] for p in projects] == ["Rocket", "Website"]
        assert [line["quantity"] for line in projects[0]["bom"]] == [1, 1]

    def test_progress_too_large_for_float(self):
        raw = {"projects": [{"name": "Rocket", "phases": [{"name": "Build", "progress": int("9" * 400)}]}]}
        projects = normalize_state(raw)["projects"]
        assert len(projects) == 1
        assert projects[0]["phases"][0]["progress"] == 0

    def test_default_names_and_colors(self):
        result = normalize_state({"projects": [{"phases": [{}, {"name": ""}]}]})
        project = result["projects"][0]
        assert project["name"] == "Project 1"
        assert [p["name"] for p in project["phases"]] == ["Phase 1", "Phase 2"]
        assert [p["color"] for p in project["phases"]] == COLOR_PALETTE[:2]

    def test_enumerations_coerced(self):
        task = normalize_state(MESSY_STATE)["projects"][0]["phases"][0]["tasks"][2]
        assert task["status"] == "todo"
        assert task["priority"] == "medium"

    def test_checklist_done_is_bool(self):
        item = normalize_state(MESSY_STATE)["projects"][0]["phases"][0]["checklist"][0]
        assert item["done"] is True

    def test_legacy_boolean_share(self):
        share = normalize_state(MESSY_STATE)["projects"][0]["share"]
        assert share == {"enabled": True, "slug": ""}

    def test_selection_must_be_string(self):
        assert normalize_state(MESSY_STATE)["selectedProjectId"] is None

    def test_timestamps_filled(self):
        project = normalize_state(MESSY_STATE)["projects"][0]
        assert project["createdAt"]
        assert project["updatedAt"] == project["createdAt"]


# ===================================================================
# Invariants
# ===================================================================

class TestInvariants:

    def test_done_forces_full_percent(self):
        task = normalize_state(MESSY_STATE)["projects"][0]["phases"][0]["tasks"][0]
        assert task["status"] == "done"
        assert task["percentComplete"] == 100

    def test_full_percent_forces_done(self):
        task = normalize_state(MESSY_STATE)["projects"][0]["phases"][0]["tasks"][1]
        assert task["percentComplete"] == 100
        assert task["status"] == "done"

    def test_legacy_slider_progress_becomes_manual(self):
        raw = {"projects": [{"phases": [{"progress": 40}, {"progress": 0}]}]}
        phases = normalize_state(raw)["projects"][0]["phases"]
        assert phases[0]["manualProgress"] == 40
        assert phases[1]["manualProgress"] is None

    def test_explicit_auto_mode_kept(self):
        raw = {"projects": [{"phases": [{"progress": 40, "manualProgress": None}]}]}
        phase = normalize_state(raw)["projects"][0]["phases"][0]
        assert phase["manualProgress"] is None

    def test_manual_progress_clamped(self):
        raw = {"projects": [{"phases": [{"manualProgress": 250}]}]}
        assert normalize_state(raw)["projects"][0]["phases"][0]["manualProgress"] == 100


# ===================================================================
# Preferences
# ===================================================================

class TestPreferences:

    def test_defaults_merged(self):
        prefs = normalize_state({"preferences": {"showFiles": False}})["preferences"]
        assert prefs == {"showNotes": True, "showFiles": False, "showChecklist": True, "theme": "dark"}

    def test_bad_theme_and_unknown_keys(self):
        prefs = normalize_state(MESSY_STATE)["preferences"]
        assert prefs["theme"] == "dark"
        assert prefs["showNotes"] is False
        assert prefs["compact"] is True


# ===================================================================
# Idempotence & typed loading
# ===================================================================

class TestIdempotence:

    @pytest.mark.parametrize("raw", [None, {}, {"projects": "not-an-array"}, MESSY_STATE])
    def test_normalize_twice_is_normalize_once(self, raw):
        once = normalize_state(raw)
        assert normalize_state(once) == once

    def test_typed_round_trip_is_stable(self):
        once = normalize_state(MESSY_STATE)
        assert load_state(once).to_dict() == once


class TestLoadState:

    def test_returns_models(self):
        state = load_state(MESSY_STATE)
        assert isinstance(state, TrackerState)
        assert state.projects[0].phases[0].tasks[0].percent_complete == 100
        assert state.preferences.show_notes is False

    def test_garbage_loads_as_empty(self):
        assert load_state("garbage").projects == []
