"""Light/dark theme preference, kept in its own storage slot apart from the todo data."""
from __future__ import annotations

import logging

from storage import Storage

logger = logging.getLogger("theme")

THEMES = ("light", "dark")


class ThemeSettings:
    """Stored "dark"/"light" wins; otherwise the system preference decides."""

    def __init__(self, storage: Storage, key: str = "theme", prefers_dark: bool = False):
        self.storage = storage
        self.key = key
        stored = storage.load(key, None)
        if stored in THEMES:
            self._theme = stored
        else:
            self._theme = "dark" if prefers_dark else "light"
        # Persist the resolved theme so later sessions start from it
        self.storage.save(self.key, self._theme)

    @property
    def theme(self) -> str:
        return self._theme

    @property
    def is_dark(self) -> bool:
        return self._theme == "dark"

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"theme must be one of {list(THEMES)}")
        self._theme = theme
        logger.debug("[theme] now %s", theme)
        self.storage.save(self.key, theme)

    def toggle_theme(self) -> str:
        self.set_theme("light" if self.is_dark else "dark")
        return self._theme
