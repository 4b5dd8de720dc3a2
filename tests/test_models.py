"""
Tests for models.py
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import DEFAULT_TAG_COLOR, Subtask, SubtaskUpdate, Tag, Todo, TodoUpdate


class TestTodo:
    def test_storage_form_is_camel_case(self):
        todo = Todo(id="1", title="x", due_date="2024-01-01", created_at="2024-01-01T00:00:00.000Z", order=1)
        data = todo.to_storage()
        assert data == {
            "id": "1",
            "title": "x",
            "completed": False,
            "dueDate": "2024-01-01",
            "priority": None,
            "tags": [],
            "subtasks": [],
            "createdAt": "2024-01-01T00:00:00.000Z",
            "order": 1,
        }
        assert Todo.model_validate(data) == todo

    def test_frozen(self):
        todo = Todo(id="1", title="x")
        with pytest.raises(ValidationError):
            todo.completed = True

    def test_unknown_priority_loads_as_none(self):
        assert Todo.model_validate({"id": "1", "title": "x", "priority": "urgent"}).priority is None

    def test_null_lists_load_empty(self):
        todo = Todo.model_validate({"id": "1", "title": "x", "tags": None, "subtasks": None})
        assert todo.tags == () and todo.subtasks == ()

    def test_stored_fields_are_coerced(self):
        todo = Todo.model_validate({
            "id": 7,
            "title": "  x ",
            "completed": "true",
            "dueDate": 20240101,
            "order": 3.0,
            "tags": "nope",
        })
        assert todo.id == "7"
        assert todo.title == "x"
        assert todo.completed is True
        assert todo.due_date is None
        assert todo.order == 3
        assert todo.tags == ()

    @pytest.mark.parametrize("order", ["x", True, 1.5, None])
    def test_unusable_order_loads_as_none(self, order):
        assert Todo.model_validate({"id": "1", "title": "x", "order": order}).order is None

    @pytest.mark.parametrize("raw", [{"title": "x"}, {"id": "  ", "title": "x"}, {"id": None, "title": "x"}])
    def test_entry_without_usable_id_rejected(self, raw):
        with pytest.raises(ValidationError):
            Todo.model_validate(raw)

    def test_subtask_progress(self):
        todo = Todo(id="1", title="x", subtasks=[Subtask(text="a", completed=True), Subtask(text="b")])
        assert todo.subtask_progress == (1, 2)


class TestTag:
    def test_unknown_color_falls_back(self):
        assert Tag(id="t", name="x", color="chartreuse").color == DEFAULT_TAG_COLOR == "red"

    def test_known_color_kept(self):
        assert Tag(id="t", name="x", color="purple").color == "purple"

    def test_name_trimmed(self):
        assert Tag(name="  Work ").name == "Work"


class TestUpdates:
    def test_only_set_fields_reported(self):
        assert TodoUpdate(priority="high").changes() == {"priority": "high"}
        assert TodoUpdate().changes() == {}

    def test_explicit_none_is_a_change(self):
        assert TodoUpdate(due_date=None).changes() == {"due_date": None}

    def test_none_tags_mean_empty(self):
        assert TodoUpdate(tags=None).changes() == {"tags": ()}

    def test_subtask_update(self):
        assert SubtaskUpdate(text=" a ").changes() == {"text": "a"}
        with pytest.raises(ValidationError):
            SubtaskUpdate(text=None)
