"""Tests for common.dates module."""

import time
from datetime import datetime, timedelta, timezone

from common.dates import parse_entry_date


class TestParseEntryDate:
    def test_parses_rfc2822_with_gmt(self) -> None:
        entry = {"published": "Mon, 01 Jan 2024 12:00:00 GMT"}
        assert parse_entry_date(entry) == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_parses_est_timezone(self) -> None:
        result = parse_entry_date({"published": "Mon, 01 Jan 2024 12:00:00 EST"})
        assert result is not None
        assert result.utcoffset() == timedelta(hours=-5)

    def test_falls_back_to_updated_field(self) -> None:
        result = parse_entry_date({"updated": "2024-01-01T12:00:00Z"})
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_naive_datetime_gets_utc(self) -> None:
        result = parse_entry_date({"published": "2024-01-01 12:00:00"})
        assert result is not None
        assert result.tzinfo == timezone.utc

    def test_unparseable_string_uses_struct_time(self) -> None:
        entry = {
            "published": "not a date",
            "published_parsed": time.strptime("2024-01-01 12:00:00", "%Y-%m-%d %H:%M:%S"),
        }
        assert parse_entry_date(entry) == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_returns_none_for_missing_date(self) -> None:
        assert parse_entry_date({}) is None

    def test_returns_none_for_invalid_date(self) -> None:
        assert parse_entry_date({"published": "not a date"}) is None
