"""Configuration load/save for tasklet."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

CONFIG_PATH = Path(__file__).resolve().parent / "config.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppConfig(BaseModel):
    """Persisted application configuration."""

    database_path: str = Field(default="", description="Path to SQLite key-value file; empty = project dir / tasklet.db")
    todos_key: str = Field(default="todos", description="Storage slot holding the todo collection")
    sort_key: str = Field(default="todo-sorting", description="Storage slot holding the sort preference")
    theme_key: str = Field(default="theme", description="Storage slot holding the theme preference")
    user_timezone: str = Field(default="UTC", description="IANA timezone used for 'today' and overdue checks")
    prefers_dark: bool = Field(default=False, description="System colour scheme hint used when no theme is stored")
    log_level: str = Field(default="INFO", description="Root log level for configure_logging()")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").strip().upper()
        return level if level in LOG_LEVELS else "INFO"

    @property
    def db_path(self) -> Path:
        if self.database_path:
            return Path(self.database_path)
        return Path(__file__).resolve().parent / "tasklet.db"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)

    def to_save_dict(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def load(cls, path: Path | None = None) -> "AppConfig":
        config_path = path or CONFIG_PATH
        if not config_path.exists():
            return cls()
        raw = json.loads(config_path.read_text())
        return cls.model_validate(raw)

    def save(self, path: Path | None = None) -> None:
        (path or CONFIG_PATH).write_text(json.dumps(self.to_save_dict(), indent=2))


def load() -> AppConfig:
    """Load config from disk. Convenience alias for AppConfig.load()."""
    return AppConfig.load()
