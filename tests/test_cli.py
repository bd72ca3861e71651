"""Tests for the typer CLI (summary / normalize)."""

import json

from typer.testing import CliRunner

from src.cli.main import app, summary
from src.tracker.models import TrackerState

runner = CliRunner()


def _write_state(path, state):
    path.write_text(json.dumps(state.to_dict()), encoding="utf-8")
    return path


def test_summary_lists_projects_and_focus(tmp_path, state, today):
    path = _write_state(tmp_path / "state.json", state)
    text = summary(str(path), today)
    lines = text.splitlines()
    assert lines[0] == "Rocket [physical] - 17% (4/5 tasks open, 2 phases)"
    assert lines[1] == "Website [digital] - 0% (1/1 tasks open, 1 phases)"
    assert "Focus:" in lines
    assert "Check weather" in lines[lines.index("Focus:") + 1]
    assert len(lines) == lines.index("Focus:") + 4


def test_summary_empty_state(tmp_path):
    path = _write_state(tmp_path / "state.json", TrackerState())
    text = summary(str(path))
    assert text.startswith("No projects yet.")
    assert text.endswith("  nothing urgent")


def test_summary_command(tmp_path, state):
    path = _write_state(tmp_path / "state.json", state)
    result = runner.invoke(app, ["summary", str(path), "--today", "2024-05-10"])
    assert result.exit_code == 0
    assert "Rocket [physical]" in result.output
    assert "Mount motor" in result.output


def test_normalize_command_writes_canonical_file(tmp_path):
    source = tmp_path / "legacy.json"
    source.write_text(json.dumps({"projects": [{"name": "Old", "phases": [{"tasks": [{}]}]}]}), encoding="utf-8")
    out = tmp_path / "out" / "clean.json"

    result = runner.invoke(app, ["normalize", str(source), "--out", str(out)])
    assert result.exit_code == 0

    data = json.loads(out.read_text(encoding="utf-8"))
    phase = data["projects"][0]["phases"][0]
    assert data["projects"][0]["id"]
    assert phase["name"] == "Phase 1"
    assert phase["tasks"][0]["status"] == "todo"
    assert data["preferences"]["theme"] == "dark"
    # source untouched
    assert "id" not in json.loads(source.read_text(encoding="utf-8"))["projects"][0]


def test_normalize_missing_file_writes_fresh_state(tmp_path):
    target = tmp_path / "missing.json"
    result = runner.invoke(app, ["normalize", str(target)])
    assert result.exit_code == 0
    assert json.loads(target.read_text(encoding="utf-8"))["projects"] == []
