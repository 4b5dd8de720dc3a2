"""
Sort todos by custom order, creation date, priority or title, and persist the user's choice.
"""
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Literal

from pydantic import BaseModel, field_validator

from date_utils import parse_timestamp
from models import Todo
from storage import Storage, is_dict

logger = logging.getLogger("sort_service")

SortBy = Literal["custom", "date", "priority", "alpha"]
SortDirection = Literal["asc", "desc"]
SORT_MODES: tuple[str, ...] = ("custom", "date", "priority", "alpha")
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


class SortPreference(BaseModel):
    """Persisted as {"sortBy": ..., "sortDirection": ...}. Each field falls back independently."""

    sort_by: SortBy = "custom"
    sort_direction: SortDirection = "asc"

    @field_validator("sort_by", mode="before")
    @classmethod
    def _known_mode(cls, v: Any) -> str:
        return v if v in SORT_MODES else "custom"

    @field_validator("sort_direction", mode="before")
    @classmethod
    def _known_direction(cls, v: Any) -> str:
        return v if v in SORT_DIRECTIONS else "asc"

    @classmethod
    def from_storage(cls, raw: dict[str, Any] | None) -> "SortPreference":
        raw = raw or {}
        return cls(sort_by=raw.get("sortBy"), sort_direction=raw.get("sortDirection"))

    def to_storage(self) -> dict[str, str]:
        return {"sortBy": self.sort_by, "sortDirection": self.sort_direction}


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _by_order(a: Todo, b: Todo) -> int:
    return _cmp(a.order or 0, b.order or 0)


def _by_date(a: Todo, b: Todo) -> int:
    return _cmp(parse_timestamp(a.created_at), parse_timestamp(b.created_at))


def _by_priority(a: Todo, b: Todo) -> int:
    return _cmp(PRIORITY_RANK.get(a.priority or "", 0), PRIORITY_RANK.get(b.priority or "", 0))


def _by_title(a: Todo, b: Todo) -> int:
    return _cmp((a.title or "").casefold(), (b.title or "").casefold())


COMPARATORS: dict[str, Callable[[Todo, Todo], int]] = {
    "custom": _by_order,
    "date": _by_date,
    "priority": _by_priority,
    "alpha": _by_title,
}


def sort_todos(
    todos: Iterable[Todo],
    sort_by: str = "custom",
    sort_direction: str = "asc",
) -> list[Todo]:
    """
    Return a new sorted list; the input is not mutated.
    Direction multiplies the comparator result, so ties keep their input order in both directions.
    Unknown modes return the todos in input order.
    """
    result = list(todos)
    compare = COMPARATORS.get(sort_by)
    if compare is None or len(result) < 2:
        return result
    sign = -1 if sort_direction == "desc" else 1
    result.sort(key=cmp_to_key(lambda a, b: compare(a, b) * sign))
    return result


class SortSettings:
    """Current sort mode and direction, saved to storage on every change."""

    def __init__(self, storage: Storage, key: str = "todo-sorting"):
        self.storage = storage
        self.key = key
        self._pref = SortPreference.from_storage(storage.load(key, None, validate=is_dict))

    @property
    def preference(self) -> SortPreference:
        return self._pref

    @property
    def sort_by(self) -> str:
        return self._pref.sort_by

    @property
    def sort_direction(self) -> str:
        return self._pref.sort_direction

    def _set(self, **changes: str) -> None:
        self._pref = self._pref.model_copy(update=changes)
        logger.debug("[sort_service] preference now %s", self._pref.to_storage())
        self.storage.save(self.key, self._pref.to_storage())

    def set_sort_by(self, value: str) -> None:
        if value not in SORT_MODES:
            raise ValueError(f"sort_by must be one of {list(SORT_MODES)}")
        self._set(sort_by=value)

    def set_sort_direction(self, value: str) -> None:
        if value not in SORT_DIRECTIONS:
            raise ValueError(f"sort_direction must be one of {list(SORT_DIRECTIONS)}")
        self._set(sort_direction=value)

    def toggle_direction(self) -> str:
        self.set_sort_direction("desc" if self.sort_direction == "asc" else "asc")
        return self.sort_direction

    def sort_todos(self, todos: Iterable[Todo]) -> list[Todo]:
        return sort_todos(todos, self.sort_by, self.sort_direction)
