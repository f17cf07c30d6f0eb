"""Tests for timestamp parsing and formatting."""

from datetime import datetime, timedelta, timezone

import pytest

from income_report.exceptions import TimestampParseError
from income_report.time_utils import format_report_timestamp, parse_rfc3339


class TestParseRfc3339:
    """Tests for strict RFC 3339 parsing."""

    def test_parse_utc_z(self) -> None:
        """Z suffix parses as UTC."""
        result = parse_rfc3339("2023-01-01T00:05:00Z")
        assert result == datetime(2023, 1, 1, 0, 5, tzinfo=timezone.utc)

    def test_parse_offset(self) -> None:
        """Numeric offsets are kept."""
        result = parse_rfc3339("2023-01-01T03:00:00+03:00")
        assert result.utcoffset() == timedelta(hours=3)
        assert result == datetime(2023, 1, 1, 0, 0, tzinfo=timezone.utc)

    def test_parse_fractional_seconds(self) -> None:
        """Fractional seconds are accepted."""
        result = parse_rfc3339("2023-01-01T00:00:00.250Z")
        assert result.microsecond == 250000

    def test_parse_nanosecond_fraction_truncated(self) -> None:
        """Fractions longer than microseconds are truncated."""
        result = parse_rfc3339("2023-01-01T00:00:00.123456789Z")
        assert result.microsecond == 123456

    @pytest.mark.parametrize(
        "value",
        [
            "2023-01-01",
            "2023-01-01 00:00:00Z",
            "2023-01-01T00:00:00",
            "2023-13-01T00:00:00Z",
            "2023-01-01T25:00:00Z",
            "not-a-date",
            "",
        ],
    )
    def test_rejects_non_rfc3339(self, value: str) -> None:
        """Values outside RFC 3339 raise TimestampParseError."""
        with pytest.raises(TimestampParseError):
            parse_rfc3339(value)


class TestFormatReportTimestamp:
    """Tests for report timestamp rendering."""

    def test_formats_second_precision_with_z(self) -> None:
        ts = datetime(2023, 1, 1, 0, 5, 0, 999999, tzinfo=timezone.utc)
        assert format_report_timestamp(ts) == "2023-01-01T00:05:00Z"

    def test_converts_offsets_to_utc(self) -> None:
        ts = datetime(2023, 1, 1, 3, 0, tzinfo=timezone(timedelta(hours=3)))
        assert format_report_timestamp(ts) == "2023-01-01T00:00:00Z"

    def test_none_is_empty(self) -> None:
        assert format_report_timestamp(None) == ""
