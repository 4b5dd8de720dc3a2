"""
Filter todos by status, priority, title search and tags.
Categories combine with AND; selected tags combine with OR (a todo needs any one of them).
"""
from __future__ import annotations

from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field, field_validator

from models import Priority, Tag, Todo

Status = Literal["all", "active", "completed"]
STATUSES: tuple[str, ...] = ("all", "active", "completed")

# Sentinel for "any priority"; None means "todos without a priority"
ALL = "all"


class FilterCriteria(BaseModel):
    """Current filter selection. Defaults match everything."""

    status: Status = "all"
    priority: Literal["all"] | Priority | None = ALL
    search_query: str = ""
    selected_tags: list[str] = Field(default_factory=list)

    @field_validator("search_query", mode="before")
    @classmethod
    def _none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("selected_tags", mode="before")
    @classmethod
    def _tag_ids(cls, v: Any) -> Any:
        if v is None:
            return []
        # Accept Tag values as well as plain ids
        return [t.id if isinstance(t, Tag) else t for t in v]

    @property
    def is_default(self) -> bool:
        return (
            self.status == "all"
            and self.priority == ALL
            and not self.search_query.strip()
            and not self.selected_tags
        )


def _matches_status(todo: Todo, status: str) -> bool:
    if status == "active":
        return not todo.completed
    if status == "completed":
        return todo.completed
    return True


def filter_todos(
    todos: Iterable[Todo],
    criteria: FilterCriteria | None = None,
    **fields: Any,
) -> list[Todo]:
    """
    Return the todos matching every filter category, preserving input order.
    Pass a FilterCriteria or its fields as keywords (status=, priority=, search_query=, selected_tags=).
    The input is never mutated.
    """
    if criteria is None:
        criteria = FilterCriteria(**fields)
    elif fields:
        criteria = FilterCriteria(**{**criteria.model_dump(), **fields})
    result = list(todos)

    if criteria.status != "all":
        result = [t for t in result if _matches_status(t, criteria.status)]

    if criteria.priority != ALL:
        result = [t for t in result if t.priority == criteria.priority]

    query = criteria.search_query.strip().lower()
    if query:
        result = [t for t in result if query in (t.title or "").lower()]

    if criteria.selected_tags:
        wanted = set(criteria.selected_tags)
        result = [t for t in result if t.tag_ids & wanted]

    return result


def tag_summary(todos: Iterable[Todo]) -> list[dict[str, Any]]:
    """
    Unique tags across the collection, in first-seen order, with the number of todos carrying each.
    Tags are identified by id; the first occurrence supplies name and colour.
    """
    seen: dict[str, dict[str, Any]] = {}
    for todo in todos:
        for tag in todo.tags:
            entry = seen.get(tag.id)
            if entry is None:
                seen[tag.id] = {"tag": tag, "count": 1}
            else:
                entry["count"] += 1
    return list(seen.values())
