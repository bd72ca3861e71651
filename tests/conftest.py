"""Shared fixtures for the tracker core test suite.

Builds small state trees with known dates so derived views are
deterministic.
"""

from datetime import date, timedelta

import pytest

from src.tracker.models import Phase, Project, Task, TrackerState


TODAY = date(2024, 5, 10)


def day(offset: int) -> str:
    """ISO date ``offset`` days from TODAY."""
    return (TODAY + timedelta(days=offset)).isoformat()


def make_task(title, status="todo", due=None, focus=False):
    percent = 100 if status == "done" else 0
    return Task(title=title, status=status, percent_complete=percent, due_date=due or "", focus=focus)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def days():
    """``days(n)`` -> ISO date n days from the pinned today."""
    return day


@pytest.fixture
def rocket():
    """A physical project with two phases and a mix of task states."""
    build = Phase(
        name="Build",
        priority="high",
        tasks=[
            make_task("Solder board", status="done"),
            make_task("Mount motor", due=day(-1)),
            make_task("Paint fins", due=day(10)),
        ],
    )
    launch = Phase(
        name="Launch",
        tasks=[
            make_task("Book field", due=day(0)),
            make_task("Check weather", due=day(3), focus=True),
        ],
    )
    return Project(name="Rocket", type="physical", description="Model rocket", phases=[build, launch])


@pytest.fixture
def website():
    docs = Phase(name="Docs", tasks=[make_task("Write README", status="progress", due=day(5))])
    return Project(name="Website", type="digital", github="https://github.com/acme/site", phases=[docs])


@pytest.fixture
def state(rocket, website):
    return TrackerState(projects=[rocket, website])
