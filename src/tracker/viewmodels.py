"""View models: (state, filters) -> plain dicts ready for any renderer.

Nothing here builds markup.  A template, a JSON API or a terminal
printer can consume the dicts as they are.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from .filters import FilterSettings, filter_projects, filter_tasks
from .models import Phase, Preferences, Project, Task, TrackerState
from .progress import (
    FOCUS_LIMIT,
    checklist_stats,
    classify_deadline,
    compute_focus_items,
    is_overdue,
    phase_auto_progress,
    phase_display_progress,
    project_progress,
)

TYPE_LABELS = {"digital": "Digital", "physical": "Physical"}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def project_card(project: Project, selected_id: Optional[str] = None) -> Dict[str, Any]:
    stats = project_progress(project)
    return {
        "id": project.id,
        "name": project.name,
        "type": project.type,
        "typeLabel": TYPE_LABELS[project.type],
        "phaseCount": len(project.phases),
        "progress": stats.progress,
        "totalTasks": stats.total_tasks,
        "openTasks": stats.open_tasks,
        "shared": project.share.enabled,
        "active": project.id == selected_id,
    }


def build_project_list(state: TrackerState, filters: Optional[FilterSettings] = None) -> List[Dict[str, Any]]:
    filters = filters or FilterSettings()
    return [
        project_card(project, state.selected_project_id)
        for project in filter_projects(state.projects, filters)
    ]


def _phase_chips(phase: Phase, prefs: Preferences) -> List[str]:
    chips = []
    if prefs.show_notes and phase.notes:
        chips.append(_plural(len(phase.notes), "note"))
    if prefs.show_files and phase.files:
        chips.append(_plural(len(phase.files), "file"))
    done, total = checklist_stats(phase.checklist)
    if prefs.show_checklist and total:
        chips.append(f"{done}/{total} steps")
    return chips


def build_timeline(project: Project, state: TrackerState) -> List[Dict[str, Any]]:
    """One card per phase, in plan order."""
    return [
        {
            "id": phase.id,
            "index": index + 1,
            "name": phase.name,
            "startDate": phase.start_date,
            "endDate": phase.end_date,
            "progress": phase_display_progress(phase),
            "progressMode": "auto" if phase.manual_progress is None else "manual",
            "color": phase.color,
            "priority": phase.priority,
            "chips": _phase_chips(phase, state.preferences),
            "active": phase.id == state.selected_phase_id,
        }
        for index, phase in enumerate(project.phases)
    ]


def task_row(task: Task, today: Optional[date] = None) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "label": task.label,
        "priority": task.priority,
        "dueDate": task.due_date,
        "deadline": classify_deadline(task.due_date, today),
        "overdue": is_overdue(task, today),
        "status": task.status,
        "percentComplete": task.percent_complete,
        "focus": task.focus,
    }


def build_phase_detail(
    project: Project,
    phase: Phase,
    filters: Optional[FilterSettings] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    filters = filters or FilterSettings()
    visible = filter_tasks(phase, filters, today)
    done, total = checklist_stats(phase.checklist)
    return {
        "id": phase.id,
        "index": project.phases.index(phase) + 1,
        "name": phase.name,
        "description": phase.description,
        "progress": phase_display_progress(phase),
        "autoProgress": phase_auto_progress(phase),
        "manualProgress": phase.manual_progress,
        "deadline": classify_deadline(phase.deadline, today),
        "checklistDone": done,
        "checklistTotal": total,
        "tasks": [task_row(task, today) for task in visible],
        "hiddenTasks": len(phase.tasks) - len(visible),
        "notes": [note.to_dict() for note in phase.notes],
        "files": [entry.to_dict() for entry in phase.files],
        "checklist": [item.to_dict() for item in phase.checklist],
    }


def build_focus_panel(state: TrackerState, today: Optional[date] = None) -> List[Dict[str, Any]]:
    return [
        {
            "projectId": item.project_id,
            "projectName": item.project_name,
            "phaseId": item.phase_id,
            "phaseName": item.phase_name,
            "reason": item.reason,
            **task_row(item.task, today),
        }
        for item in compute_focus_items(state.projects, today, limit=FOCUS_LIMIT)
    ]


def build_dashboard(
    state: TrackerState,
    filters: Optional[FilterSettings] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Everything one screen needs, selection included."""
    project = state.selected_project
    phase = state.selected_phase
    return {
        "theme": state.preferences.theme,
        "projects": build_project_list(state, filters),
        "focus": build_focus_panel(state, today),
        "project": project_card(project, state.selected_project_id) if project else None,
        "timeline": build_timeline(project, state) if project else [],
        "phase": build_phase_detail(project, phase, filters, today) if project and phase else None,
    }
