"""
Tests for storage.py
"""

from __future__ import annotations

import logging

from storage import Storage, is_dict, is_list


class TestSaveLoad:
    def test_missing_key_returns_default(self, storage):
        assert storage.load("todos", []) == []
        assert storage.load("todo-sorting") is None

    def test_round_trip_todo_array(self, storage):
        todos = [
            {
                "id": "a",
                "title": "Buy milk",
                "completed": False,
                "dueDate": None,
                "priority": None,
                "tags": [],
                "subtasks": [],
                "createdAt": "2024-01-01T00:00:00.000Z",
                "order": 1,
            },
            {
                "id": "b",
                "title": "Call dentist",
                "completed": True,
                "dueDate": "2024-02-01",
                "priority": "high",
                "tags": [{"id": "t1", "name": "Work", "color": "blue"}],
                "subtasks": [{"id": "s1", "text": "Find number", "completed": False}],
                "createdAt": "2024-01-02T00:00:00.000Z",
                "order": 2,
            },
        ]
        assert storage.save("todos", todos) is True
        assert storage.load("todos", []) == todos

    def test_round_trip_empty_array(self, storage):
        storage.save("todos", [])
        assert storage.load("todos", None) == []

    def test_save_overwrites(self, storage):
        storage.save("theme", "light")
        storage.save("theme", "dark")
        assert storage.load("theme") == "dark"

    def test_slots_are_independent(self, storage):
        storage.save("todos", [1])
        storage.save("todo-sorting", {"sortBy": "alpha", "sortDirection": "desc"})
        assert storage.load("todos") == [1]
        assert storage.load("todo-sorting") == {"sortBy": "alpha", "sortDirection": "desc"}

    def test_creates_parent_directory(self, tmp_path):
        s = Storage(tmp_path / "nested" / "dir" / "kv.db")
        assert s.save("k", {"a": 1})
        assert (tmp_path / "nested" / "dir" / "kv.db").exists()


class TestDefensiveLoad:
    def test_corrupt_json_returns_default(self, storage, caplog):
        storage.save_raw("todos", "{not json")
        with caplog.at_level(logging.WARNING, logger="storage"):
            assert storage.load("todos", []) == []
        assert "not valid JSON" in caplog.text

    def test_deeply_nested_json_returns_default(self, storage, caplog):
        storage.save_raw("todos", "[" * 200000)
        with caplog.at_level(logging.WARNING, logger="storage"):
            assert storage.load("todos", []) == []
        assert "not valid JSON" in caplog.text

    def test_wrong_shape_returns_default(self, storage):
        storage.save("todos", {"id": "1"})
        assert storage.load("todos", [], validate=is_list) == []

    def test_validate_passes_through_good_value(self, storage):
        storage.save("todo-sorting", {"sortBy": "date"})
        assert storage.load("todo-sorting", None, validate=is_dict) == {"sortBy": "date"}

    def test_shape_checks(self):
        assert is_list([]) and not is_list({})
        assert is_dict({}) and not is_dict([])


class TestFailures:
    def test_unserializable_value_is_logged_not_raised(self, storage, caplog):
        with caplog.at_level(logging.ERROR, logger="storage"):
            assert storage.save("todos", [object()]) is False
        assert "Failed to serialize" in caplog.text
        assert storage.load("todos", "default") == "default"

    def test_unavailable_store_save_returns_false(self, broken_storage, caplog):
        with caplog.at_level(logging.ERROR, logger="storage"):
            assert broken_storage.save("todos", []) is False
        assert "Failed to save" in caplog.text

    def test_unavailable_store_load_returns_default(self, broken_storage):
        assert broken_storage.load("todos", ["fallback"]) == ["fallback"]

    def test_unavailable_store_keys_and_delete(self, broken_storage):
        assert broken_storage.keys() == []
        assert broken_storage.delete("todos") is False


class TestHelpers:
    def test_keys_and_delete(self, storage):
        storage.save("b", 1)
        storage.save("a", 2)
        assert storage.keys() == ["a", "b"]
        assert storage.delete("a") is True
        assert storage.delete("a") is False
        assert storage.keys() == ["b"]

    def test_load_raw(self, storage):
        storage.save("theme", "dark")
        assert storage.load_raw("theme") == '"dark"'
        assert storage.load_raw("missing") is None
