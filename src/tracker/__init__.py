"""Project/phase/task tracking: state model, derived views and persistence."""

from .filters import FilterSettings, filter_projects, filter_tasks, project_matches, task_matches
from .models import Phase, Project, Task, TrackerState
from .normalize import create_state, load_state, normalize_state
from .persistence import (
    LocalStateStore,
    PersistenceError,
    RemoteStateStore,
    StateStore,
    TrackerError,
    TrackerSession,
)
from .progress import (
    FocusItem,
    ProjectProgress,
    classify_deadline,
    compute_focus_items,
    is_overdue,
    phase_auto_progress,
    phase_display_progress,
    project_progress,
)

__all__ = [
    "FilterSettings",
    "filter_projects",
    "filter_tasks",
    "project_matches",
    "task_matches",
    "Phase",
    "Project",
    "Task",
    "TrackerState",
    "create_state",
    "load_state",
    "normalize_state",
    "LocalStateStore",
    "PersistenceError",
    "RemoteStateStore",
    "StateStore",
    "TrackerError",
    "TrackerSession",
    "FocusItem",
    "ProjectProgress",
    "classify_deadline",
    "compute_focus_items",
    "is_overdue",
    "phase_auto_progress",
    "phase_display_progress",
    "project_progress",
]
