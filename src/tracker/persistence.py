"""State persistence: where the single JSON blob lives.

Two backends with one interface:
- ``LocalStateStore``: a JSON file named after a fixed storage key
- ``RemoteStateStore``: the server's ``/api/state`` endpoint

Both treat the tree as an opaque whole.  Every save overwrites the
previous blob (no deltas, no merge, last writer wins).
"""

from __future__ import annotations

import abc
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

import requests

from .actions import ensure_selections
from .models import STORAGE_KEY, TrackerState
from .normalize import load_state
from .progress import refresh_progress

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.environ.get(
    "TRACKER_DATA_DIR",
    os.path.join(os.path.expanduser("~"), ".local", "share", "timeline-tracker"),
)
REMOTE_TIMEOUT_SECONDS = float(os.environ.get("TRACKER_REMOTE_TIMEOUT", "5"))

SAVE_FAILED_MESSAGE = "Could not save changes."


class TrackerError(Exception):
    """Base error for the tracker package."""


class PersistenceError(TrackerError):
    """Raised when the state cannot be read from or written to its store."""


def dump_state(state: TrackerState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)


class StateStore(abc.ABC):
    """Loads and saves the whole state tree."""

    @abc.abstractmethod
    def load(self) -> TrackerState:
        """Return the stored state, normalized."""

    @abc.abstractmethod
    def save(self, state: TrackerState) -> None:
        """Overwrite the stored state with ``state``."""


class LocalStateStore(StateStore):
    """One JSON file per storage key, rewritten on every save."""

    def __init__(self, directory: Union[str, Path, None] = None, key: str = STORAGE_KEY):
        self.directory = Path(directory or DEFAULT_DATA_DIR)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> TrackerState:
        if not self.path.exists():
            return load_state(None)
        try:
            raw: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read stored state from %s: %s; starting fresh", self.path, e)
            raw = None
        return load_state(raw)

    def save(self, state: TrackerState) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(dump_state(state), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e


class RemoteStateStore(StateStore):
    """Round-trips the blob through a tracker server."""

    def __init__(
        self,
        base_url: str,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.url = base_url.rstrip("/") + "/api/state"
        self.timeout = timeout
        self.session = session or requests.Session()

    def load(self) -> TrackerState:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PersistenceError(f"GET {self.url} failed: {e}") from e
        try:
            raw = response.json()
        except ValueError as e:
            logger.warning("Server returned malformed state: %s; starting fresh", e)
            raw = None
        return load_state(raw)

    def save(self, state: TrackerState) -> None:
        try:
            response = self.session.post(self.url, json=state.to_dict(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PersistenceError(f"POST {self.url} failed: {e}") from e


class TrackerSession:
    """Owns the in-memory state and writes it through on every commit.

    Usage::

        session = TrackerSession(LocalStateStore())
        actions.create_project(session.state, "Rocket", type="physical")
        session.commit()
    """

    def __init__(self, store: StateStore, state: Optional[TrackerState] = None):
        self.store = store
        self.state = state if state is not None else store.load()
        self.status_message = ""
        ensure_selections(self.state)

    def commit(self) -> bool:
        """Fix up selections and derived progress, then save.

        Returns False (and sets ``status_message``) when the save failed.
        """
        ensure_selections(self.state)
        for project in self.state.projects:
            refresh_progress(project)
        try:
            self.store.save(self.state)
        except PersistenceError as e:
            logger.warning("Save failed: %s", e)
            self.status_message = SAVE_FAILED_MESSAGE
            return False
        self.status_message = ""
        return True
