"""Shared fixtures: every test gets its own SQLite file under tmp_path."""

from __future__ import annotations

import pytest

from storage import Storage
from todo_store import TodoStore


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path / "tasklet.db")


@pytest.fixture
def broken_storage(tmp_path):
    # A directory cannot be opened as a SQLite file, so every read/write fails
    return Storage(tmp_path)


@pytest.fixture
def store(storage):
    return TodoStore(storage)


@pytest.fixture
def seeded(storage):
    """Store preloaded with three todos in custom order 1..3."""
    storage.save(
        "todos",
        [
            {"id": "1", "title": "Buy milk", "completed": False, "order": 1, "createdAt": "2024-01-01T10:00:00.000Z"},
            {"id": "2", "title": "Call dentist", "completed": True, "order": 2, "createdAt": "2024-01-02T10:00:00.000Z"},
            {"id": "3", "title": "Write report", "completed": False, "order": 3, "createdAt": "2024-01-03T10:00:00.000Z"},
        ],
    )
    return TodoStore(storage)
