"""
Tests for date_utils.py
"""

from __future__ import annotations

from datetime import date, timezone

from date_utils import (
    format_due_date,
    is_due_today,
    is_overdue,
    now_iso,
    parse_datetime,
    parse_timestamp,
)

TODAY = date(2024, 6, 15)


class TestParsing:
    def test_now_iso_shape(self):
        value = now_iso()
        assert value.endswith("Z")
        assert parse_datetime(value) is not None

    def test_z_suffix(self):
        dt = parse_datetime("2024-01-01T00:00:00.000Z")
        assert dt.tzinfo is not None
        assert dt.utcoffset().total_seconds() == 0

    def test_date_only_is_utc_midnight(self):
        dt = parse_datetime("2024-01-01")
        assert dt.tzinfo == timezone.utc
        assert (dt.hour, dt.minute) == (0, 0)

    def test_invalid(self):
        assert parse_datetime("yesterday-ish") is None
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_timestamp(self):
        assert parse_timestamp(None) == 0.0
        assert parse_timestamp("garbage") == 0.0
        assert parse_timestamp("1970-01-01T00:00:10Z") == 10.0
        assert parse_timestamp("2024-01-02") > parse_timestamp("2024-01-01")


class TestDueDates:
    def test_due_today(self):
        assert is_due_today("2024-06-15", today=TODAY)
        assert not is_due_today("2024-06-16", today=TODAY)
        assert not is_due_today(None, today=TODAY)

    def test_overdue_is_strictly_before_today(self):
        assert is_overdue("2024-06-14", today=TODAY)
        assert not is_overdue("2024-06-15", today=TODAY)
        assert not is_overdue("2024-07-01", today=TODAY)
        assert not is_overdue("not a date", today=TODAY)

    def test_timestamp_due_uses_timezone(self):
        # 02:00 UTC on the 16th is still the 15th in New York
        due = "2024-06-16T02:00:00Z"
        assert is_due_today(due, "America/New_York", today=TODAY)
        assert not is_due_today(due, "UTC", today=TODAY)

    def test_unknown_timezone_falls_back_to_utc(self):
        assert is_due_today("2024-06-15", "Not/AZone", today=TODAY)

    def test_format(self):
        assert format_due_date("2024-06-15", today=TODAY) == "Today"
        assert format_due_date("2024-03-05", today=TODAY) == "Mar 5"
        assert format_due_date("2025-01-09", today=TODAY) == "Jan 9, 2025"
        assert format_due_date("someday", today=TODAY) == "someday"
        assert format_due_date(None, today=TODAY) == ""
