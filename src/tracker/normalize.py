"""State normalization: repair a loaded state tree into canonical shape.

``normalize_state`` accepts anything (a dict from an older schema, a
half-written blob, ``None``) and returns a JSON-ready dict in which
every collection is a list, every scalar has a type-correct value and
every entity has a non-empty id that is unique within its collection.
It never raises, and normalizing its own output changes nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .coerce import to_number, to_percent
from .ids import new_id
from .models import (
    COLOR_PALETTE,
    DEFAULT_PREFERENCES,
    ISSUE_STATUSES,
    PRIORITIES,
    PROJECT_TYPES,
    TASK_STATUSES,
    THEMES,
    TrackerState,
    now_iso,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------

def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _as_text(value: Any, default: str) -> str:
    """Like ``_as_str`` but an empty string also falls back to ``default``."""
    text = _as_str(value)
    return text if text else default


def _as_enum(value: Any, allowed: Iterable[str], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _as_timestamp(value: Any) -> str:
    return value if isinstance(value, str) and value else now_iso()


def _as_optional_id(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_count(value: Any, default: int) -> int:
    number = to_number(value)
    if number is None:
        return default
    return max(int(number), 0)


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

def _normalize_collection(
    raw: Any,
    build: Callable[[dict, int], Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Normalize every dict entry of ``raw`` and enforce unique ids.

    Non-dict entries are dropped.
    """
    seen: Set[str] = set()
    result = []
    entries = [entry for entry in _as_list(raw) if isinstance(entry, dict)]
    for index, entry in enumerate(entries):
        item = build(entry, index)
        item_id = _as_str(entry.get("id"))
        if not item_id or item_id in seen:
            item_id = new_id()
        seen.add(item_id)
        item["id"] = item_id
        result.append(item)
    return result


def _versions(raw: Any) -> List[Dict[str, str]]:
    return [
        {
            "timestamp": _as_str(entry.get("timestamp")),
            "content": _as_str(entry.get("content")),
        }
        for entry in _as_list(raw)
        if isinstance(entry, dict)
    ]


def _checklist_item(raw: dict, _index: int) -> Dict[str, Any]:
    return {"text": _as_str(raw.get("text")), "done": bool(raw.get("done"))}


def _note(raw: dict, _index: int) -> Dict[str, Any]:
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "title": _as_str(raw.get("title")),
        "content": _as_str(raw.get("content")),
        "phaseId": _as_str(raw.get("phaseId")),
        "versions": _versions(raw.get("versions")),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _file(raw: dict, _index: int) -> Dict[str, Any]:
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "name": _as_str(raw.get("name")),
        "link": _as_str(raw.get("link")),
        "note": _as_str(raw.get("note")),
        "content": _as_str(raw.get("content")),
        "mimeType": _as_str(raw.get("mimeType")),
        "phaseId": _as_str(raw.get("phaseId")),
        "versions": _versions(raw.get("versions")),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _task(raw: dict, _index: int) -> Dict[str, Any]:
    status = _as_enum(raw.get("status"), TASK_STATUSES, "todo")
    percent = to_percent(raw.get("percentComplete"))
    if status == "done":
        percent = 100
    elif percent == 100:
        status = "done"
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "title": _as_str(raw.get("title")),
        "label": _as_str(raw.get("label")),
        "priority": _as_enum(raw.get("priority"), PRIORITIES, "medium"),
        "dueDate": _as_str(raw.get("dueDate")),
        "status": status,
        "percentComplete": percent,
        "focus": bool(raw.get("focus")),
        "notes": _as_str(raw.get("notes")),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _phase(raw: dict, index: int) -> Dict[str, Any]:
    tasks = _normalize_collection(raw.get("tasks"), _task)
    progress = to_percent(raw.get("progress"))
    if "manualProgress" in raw:
        manual = raw.get("manualProgress")
        manual_progress = None if manual is None else to_percent(manual)
    else:
        # Older blobs only stored the slider value.
        manual_progress = progress if progress and not tasks else None
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "name": _as_text(raw.get("name"), f"Phase {index + 1}"),
        "description": _as_str(raw.get("description")),
        "startDate": _as_str(raw.get("startDate")),
        "endDate": _as_str(raw.get("endDate")),
        "progress": progress,
        "manualProgress": manual_progress,
        "color": _as_text(raw.get("color"), COLOR_PALETTE[index % len(COLOR_PALETTE)]),
        "priority": _as_enum(raw.get("priority"), PRIORITIES, "medium"),
        "deadline": _as_str(raw.get("deadline")),
        "tasks": tasks,
        "notes": _normalize_collection(raw.get("notes"), _note),
        "files": _normalize_collection(raw.get("files"), _file),
        "checklist": _normalize_collection(raw.get("checklist"), _checklist_item),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _bom_line(raw: dict, _index: int) -> Dict[str, Any]:
    return {
        "name": _as_str(raw.get("name")),
        "quantity": _as_count(raw.get("quantity"), 1),
        "unit": _as_str(raw.get("unit")),
        "supplier": _as_str(raw.get("supplier")),
        "link": _as_str(raw.get("link")),
        "acquired": bool(raw.get("acquired")),
        "createdAt": _as_timestamp(raw.get("createdAt")),
    }


def _logbook_entry(raw: dict, _index: int) -> Dict[str, Any]:
    return {
        "date": _as_str(raw.get("date")),
        "title": _as_str(raw.get("title")),
        "content": _as_str(raw.get("content")),
        "createdAt": _as_timestamp(raw.get("createdAt")),
    }


def _release(raw: dict, _index: int) -> Dict[str, Any]:
    return {
        "version": _as_str(raw.get("version")),
        "date": _as_str(raw.get("date")),
        "notes": _as_str(raw.get("notes")),
        "createdAt": _as_timestamp(raw.get("createdAt")),
    }


def _issue(raw: dict, _index: int) -> Dict[str, Any]:
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "title": _as_str(raw.get("title")),
        "description": _as_str(raw.get("description")),
        "status": _as_enum(raw.get("status"), ISSUE_STATUSES, "open"),
        "priority": _as_enum(raw.get("priority"), PRIORITIES, "medium"),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _share(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, bool):
        return {"enabled": raw, "slug": ""}
    share = _as_dict(raw)
    return {"enabled": bool(share.get("enabled")), "slug": _as_str(share.get("slug"))}


def _project(raw: dict, index: int) -> Dict[str, Any]:
    created = _as_timestamp(raw.get("createdAt"))
    return {
        "name": _as_text(raw.get("name"), f"Project {index + 1}"),
        # Free-form types from older blobs collapse into the fixed set.
        "type": _as_enum(raw.get("type"), PROJECT_TYPES, "digital"),
        "description": _as_str(raw.get("description")),
        "github": _as_str(raw.get("github")),
        "share": _share(raw.get("share")),
        "phases": _normalize_collection(raw.get("phases"), _phase),
        "files": _normalize_collection(raw.get("files"), _file),
        "notes": _normalize_collection(raw.get("notes"), _note),
        "bom": _normalize_collection(raw.get("bom"), _bom_line),
        "logbook": _normalize_collection(raw.get("logbook"), _logbook_entry),
        "checklist": _normalize_collection(raw.get("checklist"), _checklist_item),
        "releases": _normalize_collection(raw.get("releases"), _release),
        "issues": _normalize_collection(raw.get("issues"), _issue),
        "createdAt": created,
        "updatedAt": _as_text(raw.get("updatedAt"), created),
    }


def _preferences(raw: Any) -> Dict[str, Any]:
    prefs = {**DEFAULT_PREFERENCES, **_as_dict(raw)}
    for key in ("showNotes", "showFiles", "showChecklist"):
        prefs[key] = bool(prefs[key])
    prefs["theme"] = _as_enum(prefs["theme"], THEMES, "dark")
    return prefs


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_state() -> Dict[str, Any]:
    """Return a fresh, empty canonical state dict."""
    return {
        "projects": [],
        "preferences": dict(DEFAULT_PREFERENCES),
        "selectedProjectId": None,
        "selectedPhaseId": None,
    }


def normalize_state(raw: Any) -> Dict[str, Any]:
    """Return the canonical form of ``raw``.  Never raises."""
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("State root is %s, not an object; starting fresh", type(raw).__name__)
        return create_state()
    try:
        return {
            "projects": _normalize_collection(raw.get("projects"), _project),
            "preferences": _preferences(raw.get("preferences")),
            "selectedProjectId": _as_optional_id(raw.get("selectedProjectId")),
            "selectedPhaseId": _as_optional_id(raw.get("selectedPhaseId")),
        }
    except Exception as e:
        logger.warning("Could not normalize stored state: %s; starting fresh", e)
        return create_state()


def load_state(raw: Any) -> TrackerState:
    """Normalize ``raw`` and build the typed state tree."""
    return TrackerState.model_validate(normalize_state(raw))
