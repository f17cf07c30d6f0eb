"""Per-instrument price extremes from candle rows.

Candle rows carry ``instrument, timestamp, high, low`` in their first four
columns; any further columns are ignored.
"""

from __future__ import annotations

import logging
from typing import Iterable

from income_report.aggregation.prices import resolve_price
from income_report.exceptions import CSVParseError, TimestampParseError
from income_report.time_utils import parse_rfc3339
from income_report.types import (CandleAggregation, CandleSummary, Instrument,
                                 NumericErrorPolicy, ParseIssue)

log = logging.getLogger(__name__)

INSTRUMENT_COL = 0
TIMESTAMP_COL = 1
HIGH_COL = 2
LOW_COL = 3

_MIN_FIELDS = LOW_COL + 1


def aggregate_candles(
    rows: Iterable[list[str]],
    numeric_errors: NumericErrorPolicy | str = NumericErrorPolicy.LOG,
) -> CandleAggregation:
    """Build a :class:`CandleSummary` per instrument.

    Rows are folded in order. A lower low or a higher high than the current
    extreme replaces it together with the row's timestamp; equal prices keep
    the earlier timestamp.

    :param rows: Candle rows as lists of string fields.
    :param numeric_errors: Policy for unparseable high/low prices.
    :returns: Summaries keyed by instrument plus any non-fatal issues.
    :raises TimestampParseError: On the first row whose timestamp is not
        RFC 3339; nothing is returned in that case.
    :raises CSVParseError: If a row has fewer than four fields.
    :raises NumberParseError: On a bad price under the ``raise`` policy.
    """
    policy = NumericErrorPolicy(numeric_errors)
    summaries: dict[str, CandleSummary] = {}
    issues: list[ParseIssue] = []

    for record_number, row in enumerate(rows, start=1):
        if len(row) < _MIN_FIELDS:
            raise CSVParseError(
                f"candles record {record_number}: expected at least {_MIN_FIELDS} fields, "
                f"got {len(row)}"
            )

        try:
            timestamp = parse_rfc3339(row[TIMESTAMP_COL])
        except TimestampParseError as e:
            raise TimestampParseError(f"candles record {record_number}: {e}") from e

        high = resolve_price(
            row, HIGH_COL,
            source="candles", record_number=record_number, policy=policy, issues=issues,
        )
        low = resolve_price(
            row, LOW_COL,
            source="candles", record_number=record_number, policy=policy, issues=issues,
        )

        name = row[INSTRUMENT_COL]
        summary = summaries.get(name)
        if summary is None:
            summaries[name] = CandleSummary.first_seen(Instrument(name), timestamp, high, low)
        else:
            summary.observe(timestamp, high, low)

    log.debug("Aggregated candles for %d instruments", len(summaries))
    return CandleAggregation(summaries=summaries, issues=issues)
