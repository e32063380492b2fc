"""Shared fixtures for tests."""

from __future__ import annotations

import os
import tempfile
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

# Set up test database and log file before importing storage
_test_dir = tempfile.mkdtemp(prefix="workhours-tests-")
os.environ["WORKHOURS_DB"] = os.path.join(_test_dir, "session.db")
os.environ["WORKHOURS_LOG"] = os.path.join(_test_dir, "workhours.log")


@pytest.fixture(scope="session", autouse=True)
def setup_test_db() -> Generator[Path, None, None]:
    """Set up a test database for the entire test session."""
    import storage

    storage.DB_PATH = Path(os.environ["WORKHOURS_DB"])
    storage.init_db()

    yield storage.DB_PATH


@pytest.fixture
def temp_storage(tmp_path, monkeypatch):
    """Point storage at a fresh, initialised database for one test."""
    import storage

    monkeypatch.setattr(storage, "DB_PATH", tmp_path / "test_workhours.db")
    storage.init_db()
    return storage


@pytest.fixture
def sample_clients():
    """Two clients, created in reverse alphabetical order."""
    from models import Client

    return [
        Client(id="client-b", name="Beta Corp", created_at=datetime(2025, 12, 1, 10, 30)),
        Client(id="client-a", name="Acme", created_at=datetime(2025, 12, 1, 10, 0)),
    ]


@pytest.fixture
def sample_entry():
    """Create a sample WorkEntry for testing."""
    from models import WorkEntry

    return WorkEntry(
        id="entry-1",
        date=date(2025, 12, 9),
        hours=Decimal("3.5"),
        client_id="client-a",
        note="Maths lessons",
    )


@pytest.fixture
def sample_entries():
    """Entries across two clients in December 2025."""
    from models import WorkEntry

    return [
        WorkEntry(id="e1", date=date(2025, 12, 9), hours=Decimal("3.5"), client_id="client-a"),
        WorkEntry(id="e2", date=date(2025, 12, 9), hours=Decimal("2"), client_id="client-b"),
        WorkEntry(id="e3", date=date(2025, 12, 10), hours=Decimal("4"), client_id="client-a", note="Physics"),
        WorkEntry(id="e4", date=date(2025, 11, 27), hours=Decimal("4.5"), client_id="client-b"),
    ]
