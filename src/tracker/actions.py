"""User actions: every mutation of the state tree goes through here.

Functions take the container they change (state, project, phase ...)
explicitly and mutate it in place.  Invalid input (a blank required
field, an unknown id) is rejected quietly: the function returns
``None``/``False`` and leaves the tree untouched.  Saving is the
caller's job, see :class:`src.tracker.persistence.TrackerSession`.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, List, Optional, Union

from .coerce import to_number, to_percent
from .ids import short_id
from .models import (
    COLOR_PALETTE,
    ISSUE_STATUSES,
    PRIORITIES,
    PROJECT_TYPES,
    TASK_STATUSES,
    THEMES,
    BomLine,
    ChecklistItem,
    FileEntry,
    Issue,
    LogbookEntry,
    Note,
    Phase,
    Preferences,
    Project,
    Release,
    ShareSettings,
    Task,
    TrackerState,
    VersionSnapshot,
    now_iso,
)
from .progress import phase_display_progress

NoteContainer = Union[Project, Phase]


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _choice(value: Optional[str], allowed, fallback: str) -> str:
    return value if value in allowed else fallback


def _touch(*entities) -> None:
    stamp = now_iso()
    for entity in entities:
        entity.updated_at = stamp


def remove_entry(collection: List[Any], entry_id: str) -> bool:
    """Remove the entry with ``entry_id`` from a model list, in place."""
    for index, entry in enumerate(collection):
        if entry.id == entry_id:
            del collection[index]
            return True
    return False


# ---------------------------------------------------------------------------
# Projects & selection
# ---------------------------------------------------------------------------

def create_project(
    state: TrackerState,
    name: str,
    type: str = "digital",
    description: str = "",
    github: str = "",
) -> Optional[Project]:
    """Add a project and select it.  Projects cannot be deleted."""
    name = _clean(name)
    if not name:
        return None
    project = Project(
        name=name,
        type=_choice(type, PROJECT_TYPES, "digital"),
        description=_clean(description),
        github=_clean(github),
    )
    state.projects.append(project)
    state.selected_project_id = project.id
    state.selected_phase_id = None
    return project


def update_project(
    project: Project,
    *,
    name: Optional[str] = None,
    type: Optional[str] = None,
    description: Optional[str] = None,
    github: Optional[str] = None,
) -> bool:
    if name is not None and _clean(name):
        project.name = _clean(name)
    if type is not None:
        project.type = _choice(type, PROJECT_TYPES, project.type)
    if description is not None:
        project.description = _clean(description)
    if github is not None:
        project.github = _clean(github)
    _touch(project)
    return True


def select_project(state: TrackerState, project_id: str) -> bool:
    if state.find_project(project_id) is None:
        return False
    state.selected_project_id = project_id
    state.selected_phase_id = None
    return True


def select_phase(state: TrackerState, phase_id: str) -> bool:
    project = state.selected_project
    if project is None or project.find_phase(phase_id) is None:
        return False
    state.selected_phase_id = phase_id
    return True


def ensure_selections(state: TrackerState) -> None:
    """Point the selections at existing entities (first ones by default)."""
    if not state.projects:
        state.selected_project_id = None
        state.selected_phase_id = None
        return
    if state.selected_project is None:
        state.selected_project_id = state.projects[0].id
    project = state.selected_project
    if not project.phases:
        state.selected_phase_id = None
    elif project.find_phase(state.selected_phase_id) is None:
        state.selected_phase_id = project.phases[0].id


def set_share(project: Project, enabled: bool, slug: Optional[str] = None) -> ShareSettings:
    """Flip the share flag.  Slugs default to one derived from the name."""
    slug = _clean(slug) or project.share.slug or _slugify(project.name)
    project.share = ShareSettings(enabled=bool(enabled), slug=slug)
    _touch(project)
    return project.share


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or short_id()


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

def add_phase(
    project: Project,
    name: Optional[str] = None,
    *,
    description: str = "",
    start_date: str = "",
    end_date: str = "",
    priority: str = "medium",
    deadline: str = "",
    color: Optional[str] = None,
) -> Phase:
    index = len(project.phases)
    phase = Phase(
        name=_clean(name) or f"Phase {index + 1}",
        description=_clean(description),
        start_date=start_date or "",
        end_date=end_date or "",
        priority=_choice(priority, PRIORITIES, "medium"),
        deadline=deadline or "",
        color=color or COLOR_PALETTE[index % len(COLOR_PALETTE)],
    )
    project.phases.append(phase)
    _touch(project)
    return phase


def update_phase(
    phase: Phase,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    color: Optional[str] = None,
    priority: Optional[str] = None,
    deadline: Optional[str] = None,
) -> bool:
    # A blank name keeps the old one.
    if name is not None and _clean(name):
        phase.name = _clean(name)
    if description is not None:
        phase.description = _clean(description)
    if start_date is not None:
        phase.start_date = start_date
    if end_date is not None:
        phase.end_date = end_date
    if color:
        phase.color = color
    if priority is not None:
        phase.priority = _choice(priority, PRIORITIES, phase.priority)
    if deadline is not None:
        phase.deadline = deadline
    _touch(phase)
    return True


def set_phase_manual_progress(phase: Phase, value: Any) -> int:
    """Set the manual override (``None`` returns the phase to auto mode).

    Returns the progress now displayed.
    """
    phase.manual_progress = None if value is None else to_percent(value)
    phase.progress = phase_display_progress(phase)
    _touch(phase)
    return phase.progress


def delete_phase(state: TrackerState, project: Project, phase_id: str) -> bool:
    if not remove_entry(project.phases, phase_id):
        return False
    if state.selected_phase_id == phase_id:
        state.selected_phase_id = project.phases[0].id if project.phases else None
    _touch(project)
    return True


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def set_task_progress(task: Task, *, status: Optional[str] = None, percent: Any = None) -> Task:
    """Update status and/or completion, keeping them consistent.

    done <=> 100%.  Moving a finished task back to another status without
    an explicit percentage resets it to 0%.
    """
    new_status = status if status in TASK_STATUSES else None
    new_percent = None if to_number(percent) is None else to_percent(percent)

    if new_status == "done" or (new_status is None and new_percent == 100):
        resolved_status, resolved_percent = "done", 100
    elif new_status is not None:
        resolved_status = new_status
        if new_percent is not None and new_percent < 100:
            resolved_percent = new_percent
        elif task.percent_complete < 100:
            resolved_percent = task.percent_complete
        else:
            resolved_percent = 0
    elif new_percent is not None:
        resolved_percent = new_percent
        if task.status == "done":
            resolved_status = "progress" if new_percent > 0 else "todo"
        else:
            resolved_status = task.status
    else:
        return task

    task.status = resolved_status
    task.percent_complete = resolved_percent
    _touch(task)
    return task


def add_task(
    phase: Phase,
    title: str,
    *,
    label: str = "",
    priority: str = "medium",
    due_date: str = "",
    status: Optional[str] = None,
    percent_complete: Any = 0,
    focus: bool = False,
    notes: str = "",
) -> Optional[Task]:
    title = _clean(title)
    if not title:
        return None
    task = Task(
        title=title,
        label=_clean(label),
        priority=_choice(priority, PRIORITIES, "medium"),
        due_date=due_date or "",
        focus=bool(focus),
        notes=notes or "",
    )
    set_task_progress(task, status=status, percent=percent_complete)
    phase.tasks.append(task)
    _touch(phase)
    return task


def update_task(
    task: Task,
    *,
    title: Optional[str] = None,
    label: Optional[str] = None,
    priority: Optional[str] = None,
    due_date: Optional[str] = None,
    notes: Optional[str] = None,
) -> bool:
    if title is not None and _clean(title):
        task.title = _clean(title)
    if label is not None:
        task.label = _clean(label)
    if priority is not None:
        task.priority = _choice(priority, PRIORITIES, task.priority)
    if due_date is not None:
        task.due_date = due_date
    if notes is not None:
        task.notes = notes
    _touch(task)
    return True


def toggle_task_focus(task: Task) -> bool:
    task.focus = not task.focus
    _touch(task)
    return task.focus


def delete_task(phase: Phase, task_id: str) -> bool:
    if not remove_entry(phase.tasks, task_id):
        return False
    _touch(phase)
    return True


# ---------------------------------------------------------------------------
# Notes & files
# ---------------------------------------------------------------------------

def add_note(container: NoteContainer, title: str = "", content: str = "", phase_id: str = "") -> Optional[Note]:
    """Prepend a note.  Rejected when both title and content are blank."""
    title, content = _clean(title), _clean(content)
    if not title and not content:
        return None
    note = Note(title=title, content=content, phase_id=phase_id or "")
    container.notes.insert(0, note)
    _touch(container)
    return note


def add_file(
    container: NoteContainer,
    name: str = "",
    link: str = "",
    note: str = "",
    *,
    content: str = "",
    mime_type: str = "",
    phase_id: str = "",
) -> Optional[FileEntry]:
    """Prepend a file reference.  Rejected when every field is blank."""
    name, link, note = _clean(name), _clean(link), _clean(note)
    if not (name or link or note or content):
        return None
    entry = FileEntry(
        name=name,
        link=link,
        note=note,
        content=content or "",
        mime_type=mime_type or "",
        phase_id=phase_id or "",
    )
    container.files.insert(0, entry)
    _touch(container)
    return entry


def _save_version(entity: Union[Note, FileEntry], content: str) -> bool:
    if content == entity.content:
        return False
    snapshot = VersionSnapshot(timestamp=now_iso(), content=entity.content)
    entity.versions = [snapshot, *entity.versions]
    entity.content = content
    _touch(entity)
    return True


def save_note_content(note: Note, content: str, title: Optional[str] = None) -> bool:
    """Overwrite a note's content, snapshotting the previous text first.

    History is never pruned.
    """
    changed = _save_version(note, content or "")
    if title is not None and title.strip() != note.title:
        note.title = title.strip()
        _touch(note)
        changed = True
    return changed


def save_file_content(entry: FileEntry, content: str, mime_type: Optional[str] = None) -> bool:
    changed = _save_version(entry, content or "")
    if changed and mime_type is not None:
        entry.mime_type = mime_type
    return changed


# ---------------------------------------------------------------------------
# Checklists
# ---------------------------------------------------------------------------

def add_checklist_item(container: NoteContainer, text: str) -> Optional[ChecklistItem]:
    text = _clean(text)
    if not text:
        return None
    item = ChecklistItem(text=text)
    container.checklist.append(item)
    _touch(container)
    return item


def toggle_checklist_item(container: NoteContainer, item_id: str, done: Optional[bool] = None) -> bool:
    item = next((entry for entry in container.checklist if entry.id == item_id), None)
    if item is None:
        return False
    item.done = (not item.done) if done is None else bool(done)
    _touch(container)
    return True


def clear_checklist(container: NoteContainer) -> int:
    removed = len(container.checklist)
    container.checklist = []
    _touch(container)
    return removed


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

def _preference_field(key: str) -> Optional[str]:
    for name, field in Preferences.model_fields.items():
        if key in (name, field.alias):
            return name
    return None


def set_preference(state: TrackerState, key: str, value: Any) -> bool:
    field = _preference_field(key)
    prefs = state.preferences
    if field == "theme":
        if value not in THEMES:
            return False
        prefs.theme = value
    elif field is not None:
        setattr(prefs, field, bool(value))
    else:
        state.preferences = Preferences.model_validate({**prefs.to_dict(), key: value})
    return True


def toggle_theme(state: TrackerState) -> str:
    state.preferences.theme = "dark" if state.preferences.theme == "light" else "light"
    return state.preferences.theme


# ---------------------------------------------------------------------------
# Secondary project collections
# ---------------------------------------------------------------------------

def add_bom_line(
    project: Project,
    name: str,
    quantity: Any = 1,
    unit: str = "",
    supplier: str = "",
    link: str = "",
) -> Optional[BomLine]:
    name = _clean(name)
    if not name:
        return None
    amount = to_number(quantity)
    line = BomLine(
        name=name,
        quantity=max(int(amount), 0) if amount is not None else 1,
        unit=_clean(unit),
        supplier=_clean(supplier),
        link=_clean(link),
    )
    project.bom.append(line)
    _touch(project)
    return line


def toggle_bom_acquired(project: Project, line_id: str) -> bool:
    line = next((entry for entry in project.bom if entry.id == line_id), None)
    if line is None:
        return False
    line.acquired = not line.acquired
    _touch(project)
    return True


def add_logbook_entry(
    project: Project,
    content: str,
    title: str = "",
    day: Optional[str] = None,
) -> Optional[LogbookEntry]:
    """Prepend a logbook entry dated ``day`` (today by default)."""
    content, title = _clean(content), _clean(title)
    if not content and not title:
        return None
    entry = LogbookEntry(date=day or date.today().isoformat(), title=title, content=content)
    project.logbook.insert(0, entry)
    _touch(project)
    return entry


def add_release(project: Project, version: str, day: str = "", notes: str = "") -> Optional[Release]:
    version = _clean(version)
    if not version:
        return None
    release = Release(version=version, date=day or "", notes=_clean(notes))
    project.releases.insert(0, release)
    _touch(project)
    return release


def add_issue(project: Project, title: str, description: str = "", priority: str = "medium") -> Optional[Issue]:
    title = _clean(title)
    if not title:
        return None
    issue = Issue(
        title=title,
        description=_clean(description),
        priority=_choice(priority, PRIORITIES, "medium"),
    )
    project.issues.append(issue)
    _touch(project)
    return issue


def set_issue_status(issue: Issue, status: str) -> bool:
    if status not in ISSUE_STATUSES:
        return False
    issue.status = status
    _touch(issue)
    return True
