"""
Todo Store: owns the authoritative todo collection. All mutations go through here.
Loaded once from storage at construction; every effective mutation writes the full
collection back (write-through). Unknown ids are no-ops, never errors, so bulk actions
over stale selections stay safe.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from date_utils import now_iso
from models import Subtask, SubtaskUpdate, Tag, Todo, TodoUpdate, new_id
from storage import Storage, is_list

logger = logging.getLogger("todo_store")

Listener = Callable[[list[Todo]], None]


def _parse_todos(raw: list[Any]) -> list[Todo]:
    """Validate stored todo dicts. Bad fields are coerced by Todo; only entries without a usable id are skipped."""
    out: list[Todo] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        try:
            todo = Todo.model_validate(item)
        except ValidationError as e:
            logger.warning("Skipping malformed stored todo at index %d: %s", i, e.errors()[:1])
            continue
        if todo.id in seen:
            logger.warning("Skipping stored todo with duplicate id %s", todo.id)
            continue
        seen.add(todo.id)
        out.append(todo)
    return out


class TodoStore:
    """In-memory todo collection mirrored to one storage slot."""

    def __init__(self, storage: Storage, key: str = "todos"):
        self.storage = storage
        self.key = key
        self._todos: list[Todo] = _parse_todos(storage.load(key, [], validate=is_list))
        self._listeners: list[Listener] = []
        logger.debug("[todo_store] loaded %d todos from %r", len(self._todos), key)

    # --- queries ---

    @property
    def todos(self) -> list[Todo]:
        """Snapshot of the collection (new list; Todo values are frozen)."""
        return list(self._todos)

    def __len__(self) -> int:
        return len(self._todos)

    def get_todo(self, todo_id: str) -> Todo | None:
        return next((t for t in self._todos if t.id == todo_id), None)

    def _index_of(self, todo_id: str) -> int:
        return next((i for i, t in enumerate(self._todos) if t.id == todo_id), -1)

    # --- persistence / observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback receiving each new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def persist(self) -> bool:
        """Write the full collection to storage. A failed write leaves memory untouched."""
        return self.storage.save(self.key, [t.to_storage() for t in self._todos])

    def _commit(self, todos: list[Todo], action: str) -> list[Todo]:
        self._todos = todos
        logger.debug("[todo_store] %s -> %d todos", action, len(todos))
        self.persist()
        snapshot = self.todos
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _replace_where(
        self,
        match: Callable[[Todo], bool],
        change: Callable[[Todo], Todo],
        action: str,
    ) -> list[Todo]:
        """Apply change to every matching todo; commit only if at least one matched."""
        hit = False
        out: list[Todo] = []
        for t in self._todos:
            if match(t):
                hit = True
                out.append(change(t))
            else:
                out.append(t)
        if not hit:
            return self.todos
        return self._commit(out, action)

    # --- CRUD ---

    def add_todo(
        self,
        title: str,
        due_date: str | None = None,
        priority: str | None = None,
        tags: Iterable[Tag | dict[str, Any]] | None = None,
        subtasks: Iterable[Subtask | dict[str, Any]] | None = None,
    ) -> Todo:
        """
        Create a todo at the end of the custom order (max(order) + 1) and return it.
        Title is trimmed but not rejected when blank; callers validate input.
        """
        max_order = max([0, *(t.order or 0 for t in self._todos)])
        todo = Todo(
            id=new_id(),
            title=title,
            completed=False,
            due_date=due_date,
            priority=TodoUpdate(priority=priority).priority,
            tags=tuple(tags or ()),
            subtasks=tuple(subtasks or ()),
            created_at=now_iso(),
            order=max_order + 1,
        )
        self._commit(self._todos + [todo], f"add {todo.id}")
        return todo

    def delete_todo(self, todo_id: str) -> list[Todo]:
        """Remove a todo with its subtasks and tags. No-op if absent."""
        return self.bulk_delete([todo_id])

    def toggle_todo(self, todo_id: str) -> list[Todo]:
        return self._replace_where(
            lambda t: t.id == todo_id,
            lambda t: t.model_copy(update={"completed": not t.completed}),
            f"toggle {todo_id}",
        )

    def update_todo(self, todo_id: str, updates: TodoUpdate | dict[str, Any]) -> list[Todo]:
        """Merge-update: only fields set on the payload (title, due_date, priority, tags, subtasks) change."""
        if not isinstance(updates, TodoUpdate):
            updates = TodoUpdate.model_validate(updates)
        changes = updates.changes()
        return self._replace_where(
            lambda t: t.id == todo_id,
            lambda t: t.model_copy(update=changes),
            f"update {todo_id} {sorted(changes)}",
        )

    # --- subtasks ---

    def add_subtask(self, todo_id: str, text: str) -> Subtask | None:
        """Append a subtask to a todo. Returns the new subtask, or None if the todo is absent."""
        if self._index_of(todo_id) == -1:
            return None
        subtask = Subtask(text=text)
        self._replace_where(
            lambda t: t.id == todo_id,
            lambda t: t.model_copy(update={"subtasks": t.subtasks + (subtask,)}),
            f"add subtask {subtask.id} to {todo_id}",
        )
        return subtask

    def update_subtask(
        self,
        todo_id: str,
        subtask_id: str,
        updates: SubtaskUpdate | dict[str, Any],
    ) -> list[Todo]:
        if not isinstance(updates, SubtaskUpdate):
            updates = SubtaskUpdate.model_validate(updates)
        changes = updates.changes()
        todo = self.get_todo(todo_id)
        if todo is None or not any(s.id == subtask_id for s in todo.subtasks):
            return self.todos
        subtasks = tuple(s.model_copy(update=changes) if s.id == subtask_id else s for s in todo.subtasks)
        return self._replace_where(
            lambda t: t.id == todo_id,
            lambda t: t.model_copy(update={"subtasks": subtasks}),
            f"update subtask {subtask_id} on {todo_id}",
        )

    def delete_subtask(self, todo_id: str, subtask_id: str) -> list[Todo]:
        todo = self.get_todo(todo_id)
        if todo is None or not any(s.id == subtask_id for s in todo.subtasks):
            return self.todos
        subtasks = tuple(s for s in todo.subtasks if s.id != subtask_id)
        return self._replace_where(
            lambda t: t.id == todo_id,
            lambda t: t.model_copy(update={"subtasks": subtasks}),
            f"delete subtask {subtask_id} from {todo_id}",
        )

    # --- ordering ---

    def reorder_todos(self, active_id: str, over_id: str) -> list[Todo]:
        """
        Move the todo at active_id to over_id's position, shifting the ones between.
        Afterwards every todo's order is its 1-based position, so custom order is dense.
        No-op if either id is missing or both are the same.
        """
        old_index = self._index_of(active_id)
        new_index = self._index_of(over_id)
        if old_index == -1 or new_index == -1 or old_index == new_index:
            return self.todos
        moved = list(self._todos)
        item = moved.pop(old_index)
        moved.insert(new_index, item)
        renumbered = [t.model_copy(update={"order": i}) for i, t in enumerate(moved, start=1)]
        return self._commit(renumbered, f"reorder {active_id} -> {over_id}")

    # --- bulk ---

    def bulk_delete(self, ids: Iterable[str]) -> list[Todo]:
        id_set = set(ids)
        kept = [t for t in self._todos if t.id not in id_set]
        if len(kept) == len(self._todos):
            return self.todos
        return self._commit(kept, f"delete {len(self._todos) - len(kept)}")

    def bulk_complete(self, ids: Iterable[str]) -> list[Todo]:
        """Mark every matching todo completed. Already-completed todos are left as they are."""
        id_set = set(ids)
        return self._replace_where(
            lambda t: t.id in id_set and not t.completed,
            lambda t: t.model_copy(update={"completed": True}),
            f"complete {len(id_set)}",
        )

    def bulk_set_priority(self, ids: Iterable[str], priority: str | None) -> list[Todo]:
        # Validate through the update payload so an unknown priority raises here
        value = TodoUpdate(priority=priority).priority
        id_set = set(ids)
        return self._replace_where(
            lambda t: t.id in id_set,
            lambda t: t.model_copy(update={"priority": value}),
            f"set priority {value!r} on {len(id_set)}",
        )

    def bulk_add_tag(self, ids: Iterable[str], tag: Tag | dict[str, Any]) -> list[Todo]:
        """
        Append tag to each matching todo unless it already carries a tag with the same id.
        Dict tags must carry their id; a generated one would defeat the duplicate check.
        """
        if not isinstance(tag, Tag):
            if not isinstance(tag, dict) or not tag.get("id"):
                raise ValueError("tag must have an id")
            tag = Tag.model_validate(tag)
        id_set = set(ids)
        return self._replace_where(
            lambda t: t.id in id_set and tag.id not in t.tag_ids,
            lambda t: t.model_copy(update={"tags": t.tags + (tag,)}),
            f"add tag {tag.id} to {len(id_set)}",
        )
