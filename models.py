"""
Todo, Tag and Subtask values plus the partial-update payloads used by the store.
Values are frozen; the store replaces them on mutation (model_copy) instead of editing in place.
Serialized form uses camelCase keys (dueDate, createdAt) to match the stored blob.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from ulid import ULID

Priority = Literal["high", "medium", "low"]
PRIORITIES: tuple[str, ...] = ("high", "medium", "low")

# Fixed tag palette; first entry is the fallback for unknown colours
TAG_COLORS: tuple[str, ...] = ("red", "orange", "yellow", "green", "blue", "indigo", "purple", "pink")
DEFAULT_TAG_COLOR = TAG_COLORS[0]


def new_id() -> str:
    return str(ULID())


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def _as_text(v: Any) -> str:
    """Trimmed text; numbers are kept as their string form, anything else becomes ""."""
    if isinstance(v, str):
        return v.strip()
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return ""


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in ("true", "1", "yes")
    if isinstance(v, (int, float)):
        return v == 1
    return False


class _Value(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_storage(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class Tag(_Value):
    id: str = Field(default_factory=new_id)
    name: str = ""
    color: str = DEFAULT_TAG_COLOR

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("color", mode="before")
    @classmethod
    def _known_color(cls, v: Any) -> str:
        return v if v in TAG_COLORS else DEFAULT_TAG_COLOR


class Subtask(_Value):
    id: str = Field(default_factory=new_id)
    text: str = ""
    completed: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def _strip_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, v: Any) -> bool:
        return _as_bool(v)


def _valid_items(model: type[_Value], v: Any) -> tuple[Any, ...]:
    """Keep the list entries that validate as model; drop the rest."""
    if not isinstance(v, (list, tuple)):
        return ()
    out = []
    for item in v:
        try:
            out.append(item if isinstance(item, model) else model.model_validate(item))
        except ValidationError:
            continue
    return tuple(out)


class Todo(_Value):
    """
    Stored todos are coerced rather than rejected: a bad field falls back to its default
    so the entry survives the next write. Only a missing or blank id is fatal.
    """

    id: str
    title: str = ""
    completed: bool = False
    due_date: str | None = None
    priority: Priority | None = None
    tags: tuple[Tag, ...] = ()
    subtasks: tuple[Subtask, ...] = ()
    # Missing created_at sorts as epoch 0; missing order sorts as 0
    created_at: str | None = None
    order: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _usable_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and not v.strip():
            raise ValueError("id is required")
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("completed", mode="before")
    @classmethod
    def _coerce_completed(cls, v: Any) -> bool:
        return _as_bool(v)

    @field_validator("due_date", "created_at", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @field_validator("order", mode="before")
    @classmethod
    def _int_or_none(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return None

    @field_validator("priority", mode="before")
    @classmethod
    def _known_priority(cls, v: Any) -> Any:
        # Stored blobs may carry stale or hand-edited values; treat them as "no priority"
        return v if v in PRIORITIES else None

    @field_validator("tags", mode="before")
    @classmethod
    def _valid_tags(cls, v: Any) -> Any:
        return _valid_items(Tag, v)

    @field_validator("subtasks", mode="before")
    @classmethod
    def _valid_subtasks(cls, v: Any) -> Any:
        return _valid_items(Subtask, v)

    @property
    def tag_ids(self) -> set[str]:
        return {t.id for t in self.tags}

    @property
    def subtask_progress(self) -> tuple[int, int]:
        """(completed, total) subtasks."""
        return sum(1 for s in self.subtasks if s.completed), len(self.subtasks)


class _Update(BaseModel):
    """Explicit field mask: only fields the caller passed are applied (model_fields_set)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class TodoUpdate(_Update):
    title: str = ""
    due_date: str | None = None
    priority: Priority | None = None
    tags: tuple[Tag, ...] = ()
    subtasks: tuple[Subtask, ...] = ()

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("title cannot be null")
        return _strip(v)

    @field_validator("tags", "subtasks", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return () if v is None else v


class SubtaskUpdate(_Update):
    text: str = ""
    completed: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def _strip_text(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("text cannot be null")
        return _strip(v)
