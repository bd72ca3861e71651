"""Shared fixtures for API integration tests.

Uses FastAPI TestClient (in-memory, no network) so tests run
without a live server.  The state file and upload directory are
redirected into a per-test temporary directory.
"""

from __future__ import annotations

import os
import sys

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _isolated_storage(tmp_path, monkeypatch):
    """Point the state file and upload directory at tmp_path."""
    from core import storage
    from services.api.app import db

    monkeypatch.setattr(db, "STATE_FILE", str(tmp_path / "data" / "state.json"))
    monkeypatch.setattr(storage, "LOCAL_UPLOAD_DIR", str(tmp_path / "uploads"))
    yield


@pytest.fixture()
def state_path(tmp_path):
    return tmp_path / "data" / "state.json"


@pytest.fixture()
def upload_path(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def client():
    """FastAPI TestClient: no network, no server startup needed."""
    from fastapi.testclient import TestClient

    from services.api.app.main import app

    return TestClient(app)
