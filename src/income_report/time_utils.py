"""Centralised timestamp handling.

Candle timestamps are parsed strictly as RFC 3339 and kept as timezone-aware
``datetime`` values. Report timestamps are rendered in UTC with second
precision and a literal ``Z`` suffix.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from income_report.exceptions import TimestampParseError

# RFC 3339 date-time: full date, "T", full time with mandatory offset.
_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"[Tt]"
    r"\d{2}:\d{2}:\d{2}(\.\d+)?"
    r"([Zz]|[+-]\d{2}:\d{2})$"
)

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp to a timezone-aware datetime.

    Date-only values, space separators and timestamps without an offset are
    rejected even though :meth:`datetime.fromisoformat` would accept them.

    :param value: Timestamp text such as ``2023-01-01T00:05:00Z``.
    :returns: Timezone-aware datetime.
    :raises TimestampParseError: If the text is not RFC 3339.
    """
    match = _RFC3339_RE.match(value)
    if match is None:
        raise TimestampParseError(f"Invalid RFC 3339 timestamp: {value!r}")

    text = value.upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    # fromisoformat wants exactly microseconds; longer fractions are truncated.
    fraction = match.group(1)
    if fraction:
        text = text.replace(fraction, "." + fraction[1:7].ljust(6, "0"), 1)

    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise TimestampParseError(f"Invalid RFC 3339 timestamp: {value!r}") from e


def format_report_timestamp(value: datetime | None) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC.

    :param value: Timestamp to render, or None.
    :returns: Formatted string, or an empty string for None.
    """
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(REPORT_TIMESTAMP_FORMAT)


__all__ = ["parse_rfc3339", "format_report_timestamp", "REPORT_TIMESTAMP_FORMAT"]
