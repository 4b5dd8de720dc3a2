"""
Composition root: one tasklet session wiring storage, the todo store, sort/theme settings,
filter criteria and the selection. View layers hold a TodoApp and call into it.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

from config import AppConfig
from config import load as load_config
from filter_service import FilterCriteria, filter_todos, tag_summary
from models import Tag, Todo
from selection import Selection
from sort_service import SortSettings
from storage import Storage
from theme import ThemeSettings
from todo_store import TodoStore

logger = logging.getLogger("tasklet.app")


def configure_logging(level: int = logging.INFO) -> None:
    """Send app loggers (storage, todo_store, ...) to stderr in one format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


class TodoApp:
    """Explicit session object; construct once and pass it to whatever renders the list."""

    def __init__(self, config: AppConfig | None = None, storage: Storage | None = None):
        self.config = config or load_config()
        self.storage = storage or Storage(self.config.db_path)
        self.store = TodoStore(self.storage, key=self.config.todos_key)
        self.sorting = SortSettings(self.storage, key=self.config.sort_key)
        self.theme = ThemeSettings(self.storage, key=self.config.theme_key, prefers_dark=self.config.prefers_dark)
        self.selection = Selection()
        self.criteria = FilterCriteria()
        self.store.subscribe(self._on_todos_changed)

    def _on_todos_changed(self, todos: list[Todo]) -> None:
        removed = self.selection.prune(t.id for t in todos)
        if removed:
            logger.debug("Dropped %d stale selected ids", removed)

    # --- view queries ---

    def visible_todos(self) -> list[Todo]:
        """Current collection, filtered then sorted."""
        return self.sorting.sort_todos(filter_todos(self.store.todos, self.criteria))

    def visible_ids(self) -> list[str]:
        return [t.id for t in self.visible_todos()]

    def tags(self) -> list[dict[str, Any]]:
        return tag_summary(self.store.todos)

    def set_filter(self, **fields: Any) -> FilterCriteria:
        """Replace the given filter fields. Clears the selection, which may no longer be visible."""
        self.criteria = FilterCriteria(**{**self.criteria.model_dump(), **fields})
        self.selection.clear_selection()
        return self.criteria

    def reset_filter(self) -> FilterCriteria:
        self.criteria = FilterCriteria()
        self.selection.clear_selection()
        return self.criteria

    # --- selection + bulk ---

    def select_all_visible(self) -> None:
        self.selection.select_all(self.visible_ids())

    def selected_visible_ids(self) -> list[str]:
        """Selected ids in display order."""
        return [tid for tid in self.visible_ids() if self.selection.is_selected(tid)]

    def complete_selected(self) -> list[Todo]:
        return self.store.bulk_complete(self.selection.selected_ids)

    def delete_selected(self) -> list[Todo]:
        todos = self.store.bulk_delete(self.selection.selected_ids)
        self.selection.clear_selection()
        return todos

    def set_priority_selected(self, priority: str | None) -> list[Todo]:
        return self.store.bulk_set_priority(self.selection.selected_ids, priority)

    def tag_selected(self, tag: Tag | dict[str, Any]) -> list[Todo]:
        return self.store.bulk_add_tag(self.selection.selected_ids, tag)

    def move(self, active_id: str, over_id: str) -> list[Todo]:
        """Drag-and-drop intent. Only meaningful while the list shows custom order."""
        if self.sorting.sort_by != "custom":
            logger.info("Ignoring reorder while sorted by %s", self.sorting.sort_by)
            return self.store.todos
        return self.store.reorder_todos(active_id, over_id)


def open_app(config: AppConfig | None = None) -> TodoApp:
    """Configure logging from config and build a session."""
    cfg = config or load_config()
    configure_logging(cfg.log_level_value)
    return TodoApp(cfg)
