"""Join user round trips with candle summaries into report rows."""

from __future__ import annotations

import logging
from typing import Mapping

from income_report.types import (CandleSummary, Instrument, ReportRow, UserId,
                                 UserSummary)

log = logging.getLogger(__name__)


def format_report(
    candles: Mapping[str, CandleSummary],
    users: Mapping[str, UserSummary],
    sort_rows: bool = False,
) -> list[ReportRow]:
    """Build one :class:`ReportRow` per (user, instrument) round trip.

    A round trip without a sale counts as zero income. An instrument missing
    from the candle data gets zero maximum income and no sale window; this is
    logged but never fails the report.

    :param candles: Candle summaries keyed by instrument.
    :param users: User summaries keyed by user id.
    :param sort_rows: Sort by (user, instrument) instead of input order.
    :returns: Report rows.
    """
    rows: list[ReportRow] = []
    missing: set[str] = set()

    for user_id, user in users.items():
        for instrument, ticker in user.tickers.items():
            user_income = ticker.income if ticker.income is not None else 0.0

            summary = candles.get(instrument)
            if summary is None:
                missing.add(instrument)
                max_income = 0.0
                window_end = window_start = None
            else:
                max_income = summary.income
                window_end = summary.max_price_time
                window_start = summary.min_price_time

            rows.append(
                ReportRow(
                    user_id=UserId(user_id),
                    instrument=Instrument(instrument),
                    user_income=user_income,
                    max_income=max_income,
                    shortfall=max_income - user_income,
                    sale_window_end=window_end,
                    sale_window_start=window_start,
                )
            )

    for instrument in sorted(missing):
        log.warning("No candle data for instrument %r; max income reported as 0.00", instrument)

    if sort_rows:
        rows.sort(key=lambda r: (r.user_id, r.instrument))
    return rows
