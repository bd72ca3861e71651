"""Filter predicates over projects and tasks.

Four independent axes: free-text search, project type, task status and
deadline bucket.  ``"all"`` (or an empty search) disables an axis, and
axes combine with AND.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .models import Phase, Project, Task
from .progress import classify_deadline

ALL = "all"


@dataclass(frozen=True)
class FilterSettings:
    search: str = ""
    type: str = ALL
    status: str = ALL
    deadline: str = ALL

    @property
    def is_default(self) -> bool:
        return not self.search.strip() and self.type == self.status == self.deadline == ALL


def project_search_text(project: Project) -> str:
    """Lower-cased haystack for the search box."""
    parts = [project.name, project.description, project.github]
    for phase in project.phases:
        parts.append(phase.name)
        for task in phase.tasks:
            parts.extend((task.title, task.label))
        for note in phase.notes:
            parts.extend((note.title, note.content))
    for note in project.notes:
        parts.extend((note.title, note.content))
    return " ".join(part for part in parts if part).lower()


def project_matches(project: Project, filters: FilterSettings) -> bool:
    if filters.type != ALL and project.type != filters.type:
        return False
    needle = filters.search.strip().lower()
    if not needle:
        return True
    return needle in project_search_text(project)


def task_matches(task: Task, filters: FilterSettings, today: Optional[date] = None) -> bool:
    if filters.status != ALL and task.status != filters.status:
        return False
    if filters.deadline != ALL and classify_deadline(task.due_date, today) != filters.deadline:
        return False
    return True


def filter_projects(projects: List[Project], filters: FilterSettings) -> List[Project]:
    return [project for project in projects if project_matches(project, filters)]


def filter_tasks(phase: Phase, filters: FilterSettings, today: Optional[date] = None) -> List[Task]:
    return [task for task in phase.tasks if task_matches(task, filters, today)]
