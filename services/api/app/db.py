"""State file layer.

The server keeps the whole tracker state in a single JSON file
(``STATE_FILE``).  Reads create a default file on first access; writes
overwrite the file completely.  There is no locking: concurrent writers
race and the last one wins.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

STATE_FILE = os.environ.get("STATE_FILE", os.path.join("data", "state.json"))

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "showNotes": True,
    "showFiles": True,
    "showChecklist": True,
    "theme": "dark",
}


def _state_path() -> Path:
    return Path(STATE_FILE)


def _uuid() -> str:
    return str(uuid.uuid4())


def default_state() -> Dict[str, Any]:
    return {
        "projects": [],
        "preferences": dict(DEFAULT_PREFERENCES),
        "selectedProjectId": None,
        "selectedPhaseId": None,
    }


def coerce_state(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Minimal shape repair applied before a write.

    - ``projects`` that is not a list becomes ``[]``; project entries
      without an id get one
    - ``preferences`` that is not an object falls back to the defaults
    - selections default to ``None``

    Everything else is stored as sent; full normalization happens in the
    client when the blob is loaded.
    """
    projects = payload.get("projects")
    if not isinstance(projects, list):
        projects = []
    coerced_projects = []
    for project in projects:
        if isinstance(project, dict) and not project.get("id"):
            project = {**project, "id": _uuid()}
        coerced_projects.append(project)

    preferences = payload.get("preferences")
    if not isinstance(preferences, dict):
        preferences = dict(DEFAULT_PREFERENCES)

    return {
        **payload,
        "projects": coerced_projects,
        "preferences": preferences,
        "selectedProjectId": payload.get("selectedProjectId"),
        "selectedPhaseId": payload.get("selectedPhaseId"),
    }


def write_state(state: Dict[str, Any]) -> None:
    """Overwrite the state file.  Raises OSError on failure."""
    path = _state_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("State written to %s (%d projects)", path, len(state.get("projects", [])))


def read_state() -> Dict[str, Any]:
    """Return the stored state, creating a default file if none exists.

    A corrupt file is reported and served as the default state (the file
    itself is left in place until the next write).
    """
    path = _state_path()
    if not path.exists():
        state = default_state()
        write_state(state)
        return state
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        logger.warning("State file %s is not valid JSON: %s; serving defaults", path, e)
        return default_state()
    if not isinstance(data, dict):
        logger.warning("State file %s does not hold an object; serving defaults", path)
        return default_state()
    return data
