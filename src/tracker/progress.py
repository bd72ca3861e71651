"""Derived views: progress aggregation, deadline buckets and focus ranking.

Every function here is pure.  Date-dependent helpers take an optional
``today`` so callers (and tests) can pin the current day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union

from .coerce import round_half_up
from .models import ChecklistItem, Phase, Project, Task

DeadlineBucket = Literal["none", "overdue", "today", "upcoming", "future"]
DEADLINE_BUCKETS = ("none", "overdue", "today", "upcoming", "future")

UPCOMING_WINDOW_DAYS = 7
FOCUS_LIMIT = 3

DateLike = Union[str, date, datetime, None]


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectProgress:
    progress: int
    total_tasks: int
    open_tasks: int


def phase_auto_progress(phase: Phase) -> int:
    """Share of done tasks, as a rounded percentage.  0 without tasks."""
    total = len(phase.tasks)
    if total == 0:
        return 0
    done = sum(1 for task in phase.tasks if task.status == "done")
    return round_half_up(100 * done / total)


def phase_display_progress(phase: Phase) -> int:
    """Manual override when one is set, otherwise the auto value."""
    if phase.manual_progress is not None:
        return phase.manual_progress
    return phase_auto_progress(phase)


def project_progress(project: Project) -> ProjectProgress:
    phases = project.phases
    if phases:
        mean = sum(phase_display_progress(p) for p in phases) / len(phases)
        progress = round_half_up(mean)
    else:
        progress = 0
    tasks = [task for phase in phases for task in phase.tasks]
    open_tasks = sum(1 for task in tasks if task.status != "done")
    return ProjectProgress(progress=progress, total_tasks=len(tasks), open_tasks=open_tasks)


def refresh_progress(project: Project) -> None:
    """Write each phase's displayed progress back into ``phase.progress``."""
    for phase in project.phases:
        value = phase_display_progress(phase)
        if phase.progress != value:
            phase.progress = value


def checklist_stats(items: Sequence[ChecklistItem]) -> Tuple[int, int]:
    """Return ``(done, total)`` for a checklist."""
    return sum(1 for item in items if item.done), len(items)


# ---------------------------------------------------------------------------
# Deadlines
# ---------------------------------------------------------------------------

def parse_day(value: DateLike) -> Optional[date]:
    """Reduce ``value`` to a calendar day.  Unparseable input gives None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def classify_deadline(value: DateLike, today: Optional[date] = None) -> DeadlineBucket:
    """Bucket a date relative to ``today`` (time of day is ignored).

    overdue  : strictly before today
    today    : same day
    upcoming : 1..7 days ahead
    future   : more than 7 days ahead
    none     : no (usable) date
    """
    day = parse_day(value)
    if day is None:
        return "none"
    current = today or date.today()
    delta = (day - current).days
    if delta < 0:
        return "overdue"
    if delta == 0:
        return "today"
    if delta <= UPCOMING_WINDOW_DAYS:
        return "upcoming"
    return "future"


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    if not task.due_date or task.status == "done":
        return False
    return classify_deadline(task.due_date, today) == "overdue"


# ---------------------------------------------------------------------------
# Focus
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FocusItem:
    """A task surfaced for immediate attention, with where it lives."""

    project_id: str
    project_name: str
    phase_id: str
    phase_name: str
    task: Task
    score: int
    reason: str


_DEADLINE_SCORES = {"overdue": (1, "overdue"), "today": (2, "due today"), "upcoming": (3, "upcoming")}


def _focus_score(task: Task, today: Optional[date]) -> Optional[Tuple[int, str]]:
    if task.focus:
        return 0, "pinned"
    if task.status == "done":
        return None
    return _DEADLINE_SCORES.get(classify_deadline(task.due_date, today))


def compute_focus_items(
    projects: Iterable[Project],
    today: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[FocusItem]:
    """Rank tasks: pinned, then overdue, due today, upcoming.

    Ties keep discovery order (projects → phases → tasks).  Each task
    appears once, with its best score.  Pass ``limit=FOCUS_LIMIT`` for
    the short list shown to users.
    """
    items = []
    for project in projects:
        for phase in project.phases:
            for task in phase.tasks:
                scored = _focus_score(task, today)
                if scored is None:
                    continue
                score, reason = scored
                items.append(
                    FocusItem(
                        project_id=project.id,
                        project_name=project.name,
                        phase_id=phase.id,
                        phase_name=phase.name,
                        task=task,
                        score=score,
                        reason=reason,
                    )
                )
    items.sort(key=lambda item: item.score)
    if limit is not None:
        return items[:limit]
    return items
