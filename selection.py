"""Ephemeral set of todo ids picked for bulk actions. Independent of completion state; never persisted."""
from __future__ import annotations

from typing import Iterable


class Selection:
    def __init__(self, ids: Iterable[str] | None = None):
        self._ids: set[str] = set(ids or ())

    @property
    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def selection_count(self) -> int:
        return len(self._ids)

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def toggle_selection(self, todo_id: str) -> bool:
        """Add the id if absent, remove it if present. Returns whether it is now selected."""
        if todo_id in self._ids:
            self._ids.discard(todo_id)
            return False
        self._ids.add(todo_id)
        return True

    def select_all(self, ids: Iterable[str]) -> None:
        """Replace the selection wholesale."""
        self._ids = set(ids)

    def clear_selection(self) -> None:
        self._ids = set()

    def is_selected(self, todo_id: str) -> bool:
        return todo_id in self._ids

    def prune(self, existing_ids: Iterable[str]) -> int:
        """Drop ids no longer present in the collection. Returns how many were removed."""
        keep = self._ids & set(existing_ids)
        removed = len(self._ids) - len(keep)
        self._ids = keep
        return removed
