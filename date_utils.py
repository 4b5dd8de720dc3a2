"""
Timestamp parsing and due-date helpers. "Today" is resolved in the user's timezone.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Already ISO date
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def now_iso() -> str:
    """Current UTC time with millisecond precision, e.g. 2024-01-03T09:15:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _zone(tz_name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo((tz_name or "").strip() or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def _today_in_tz(tz_name: str | None) -> date:
    return datetime.now(_zone(tz_name)).date()


def parse_datetime(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 string into an aware datetime (naive values are taken as UTC).
    Accepts "YYYY-MM-DD", "YYYY-MM-DDTHH:MM:SS", a trailing "Z", and fractional seconds.
    Returns None for empty or unparseable input.
    """
    if not value or not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: str | None) -> float:
    """Epoch seconds for an ISO string; 0.0 when missing or invalid."""
    dt = parse_datetime(value)
    return dt.timestamp() if dt else 0.0


def _due_day(due: str | None, tz_name: str | None) -> date | None:
    """Calendar day of a due date in the user's timezone. Date-only values are taken literally."""
    if not due or not isinstance(due, str):
        return None
    raw = due.strip()
    if _ISO_DATE.match(raw):
        try:
            return date.fromisoformat(raw)
        except ValueError:
            return None
    dt = parse_datetime(raw)
    return dt.astimezone(_zone(tz_name)).date() if dt else None


def is_due_today(due: str | None, tz_name: str = "UTC", today: date | None = None) -> bool:
    day = _due_day(due, tz_name)
    return day is not None and day == (today or _today_in_tz(tz_name))


def is_overdue(due: str | None, tz_name: str = "UTC", today: date | None = None) -> bool:
    """True if the due date falls on a day strictly before today."""
    day = _due_day(due, tz_name)
    return day is not None and day < (today or _today_in_tz(tz_name))


def format_due_date(due: str | None, tz_name: str = "UTC", today: date | None = None) -> str:
    """
    Short label for a due date: "Today", "Mar 5" in the current year, "Mar 5, 2027" otherwise.
    Unparseable values are returned as given.
    """
    day = _due_day(due, tz_name)
    if day is None:
        return str(due or "")
    ref = today or _today_in_tz(tz_name)
    if day == ref:
        return "Today"
    label = f"{_MONTHS[day.month - 1]} {day.day}"
    if day.year != ref.year:
        label += f", {day.year}"
    return label
