"""
Timeline Tracker - Data Models
==============================

Pydantic v2 models for the persisted state tree:

  State    : TrackerState, Preferences
  Project  : Project, ShareSettings
  Planning : Phase, Task, ChecklistItem
  Content  : Note, FileEntry, VersionSnapshot
  Variant  : BomLine, LogbookEntry, Release, Issue

Convention
----------
- Python attributes are snake_case; JSON keys are camelCase
  (``created_at`` <-> ``createdAt``).  Always dump with
  :meth:`TrackerModel.to_dict` so the stored blob keeps its shape.
- Dates (``due_date``, ``start_date`` ...) are ``YYYY-MM-DD`` strings,
  ``""`` when unset.  Timestamps are ISO-8601 strings in UTC.
- The models do not repair data.  Raw input goes through
  :func:`src.tracker.normalize.normalize_state` first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .ids import new_id


ProjectType = Literal["digital", "physical"]
Priority = Literal["high", "medium", "low"]
TaskStatus = Literal["todo", "progress", "blocked", "done"]
IssueStatus = Literal["open", "closed"]
Theme = Literal["dark", "light"]

PROJECT_TYPES = ("digital", "physical")
PRIORITIES = ("high", "medium", "low")
TASK_STATUSES = ("todo", "progress", "blocked", "done")
ISSUE_STATUSES = ("open", "closed")
THEMES = ("dark", "light")

COLOR_PALETTE = ["#38bdf8", "#818cf8", "#f472b6", "#22d3ee", "#f97316", "#a855f7"]

STORAGE_KEY = "codex-timeline-state-v1"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TrackerModel(BaseModel):
    """Base for all state models (camelCase aliases, assignment validation)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# ============================================================
# Small building blocks
# ============================================================


class VersionSnapshot(TrackerModel):
    """An immutable copy of an earlier ``content`` value."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    content: str = ""


class ChecklistItem(TrackerModel):
    id: str = Field(default_factory=new_id)
    text: str = ""
    done: bool = False


class ShareSettings(TrackerModel):
    """Informational share flag.  No access control is attached to it."""

    enabled: bool = False
    slug: str = ""


# ============================================================
# Notes & files
# ============================================================


class Note(TrackerModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    content: str = ""
    phase_id: str = ""
    versions: List[VersionSnapshot] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


class FileEntry(TrackerModel):
    """A file reference: external link, uploaded path or inline data URL."""

    id: str = Field(default_factory=new_id)
    name: str = ""
    link: str = ""
    note: str = ""
    content: str = ""
    mime_type: str = ""
    phase_id: str = ""
    versions: List[VersionSnapshot] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


# ============================================================
# Planning
# ============================================================


class Task(TrackerModel):
    """A unit of work inside a phase.

    ``status`` and ``percent_complete`` are kept in sync by
    :func:`src.tracker.actions.set_task_progress`; do not assign them
    independently.
    """

    id: str = Field(default_factory=new_id)
    title: str = ""
    label: str = ""
    priority: Priority = "medium"
    due_date: str = ""
    status: TaskStatus = "todo"
    percent_complete: int = Field(default=0, ge=0, le=100)
    focus: bool = False
    notes: str = ""
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


class Phase(TrackerModel):
    """A stage of a project's plan.

    ``manual_progress`` is the explicit override (``None`` means the
    progress is derived from tasks); ``progress`` holds the last
    displayed value.
    """

    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    progress: int = Field(default=0, ge=0, le=100)
    manual_progress: Optional[int] = Field(default=None, ge=0, le=100)
    color: str = COLOR_PALETTE[0]
    priority: Priority = "medium"
    deadline: str = ""
    tasks: List[Task] = Field(default_factory=list)
    notes: List[Note] = Field(default_factory=list)
    files: List[FileEntry] = Field(default_factory=list)
    checklist: List[ChecklistItem] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


# ============================================================
# Secondary project collections
# ============================================================


class BomLine(TrackerModel):
    """Bill-of-materials line for physical builds."""

    id: str = Field(default_factory=new_id)
    name: str = ""
    quantity: int = Field(default=1, ge=0)
    unit: str = ""
    supplier: str = ""
    link: str = ""
    acquired: bool = False
    created_at: str = Field(default_factory=now_iso)


class LogbookEntry(TrackerModel):
    id: str = Field(default_factory=new_id)
    date: str = ""
    title: str = ""
    content: str = ""
    created_at: str = Field(default_factory=now_iso)


class Release(TrackerModel):
    id: str = Field(default_factory=new_id)
    version: str = ""
    date: str = ""
    notes: str = ""
    created_at: str = Field(default_factory=now_iso)


class Issue(TrackerModel):
    id: str = Field(default_factory=new_id)
    title: str = ""
    description: str = ""
    status: IssueStatus = "open"
    priority: Priority = "medium"
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


# ============================================================
# Project & state
# ============================================================


class Project(TrackerModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    type: ProjectType = "digital"
    description: str = ""
    github: str = ""
    share: ShareSettings = Field(default_factory=ShareSettings)
    phases: List[Phase] = Field(default_factory=list)
    files: List[FileEntry] = Field(default_factory=list)
    notes: List[Note] = Field(default_factory=list)
    bom: List[BomLine] = Field(default_factory=list)
    logbook: List[LogbookEntry] = Field(default_factory=list)
    checklist: List[ChecklistItem] = Field(default_factory=list)
    releases: List[Release] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    def find_phase(self, phase_id: Optional[str]) -> Optional[Phase]:
        if not phase_id:
            return None
        return next((p for p in self.phases if p.id == phase_id), None)


class Preferences(TrackerModel):
    """Display preferences.  Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    show_notes: bool = True
    show_files: bool = True
    show_checklist: bool = True
    theme: Theme = "dark"


DEFAULT_PREFERENCES: Dict[str, Any] = Preferences().to_dict()


class TrackerState(TrackerModel):
    """The whole persisted tree.  Passed explicitly to every operation."""

    projects: List[Project] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    selected_project_id: Optional[str] = None
    selected_phase_id: Optional[str] = None

    def find_project(self, project_id: Optional[str]) -> Optional[Project]:
        if not project_id:
            return None
        return next((p for p in self.projects if p.id == project_id), None)

    @property
    def selected_project(self) -> Optional[Project]:
        return self.find_project(self.selected_project_id)

    @property
    def selected_phase(self) -> Optional[Phase]:
        project = self.selected_project
        if project is None:
            return None
        return project.find_phase(self.selected_phase_id)
