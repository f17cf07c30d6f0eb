"""Per-user, per-instrument round trips from user trade rows.

Trade rows carry ``user_id, timestamp, instrument, buy_price, sale_price`` in
their first five columns. The first row for a (user, instrument) pair opens a
round trip from its buy price; the second closes it with its sale price.
"""

from __future__ import annotations

import logging
from typing import Iterable

from income_report.aggregation.prices import resolve_price
from income_report.exceptions import CSVParseError, TradeSequenceError
from income_report.types import (DuplicateTradePolicy, Instrument,
                                 NumericErrorPolicy, ParseIssue,
                                 TradeAggregation, TradeState, UserId,
                                 UserSummary, UserTicker)

log = logging.getLogger(__name__)

USER_COL = 0
TIMESTAMP_COL = 1
INSTRUMENT_COL = 2
BUY_PRICE_COL = 3
SALE_PRICE_COL = 4

_MIN_FIELDS = SALE_PRICE_COL + 1


def aggregate_trades(
    rows: Iterable[list[str]],
    numeric_errors: NumericErrorPolicy | str = NumericErrorPolicy.LOG,
    duplicate_policy: DuplicateTradePolicy | str = DuplicateTradePolicy.OVERWRITE,
) -> TradeAggregation:
    """Build a :class:`UserSummary` per user.

    Each (user, instrument) pair moves through ``AWAITING_SALE`` to
    ``CLOSED``. Rows arriving after the pair is closed are handled by
    ``duplicate_policy``:

    - ``overwrite``: the row is treated as a new sale and replaces the
      recorded sale price and income.
    - ``ignore``: the row is skipped and reported as an issue.
    - ``reject``: :class:`TradeSequenceError` is raised.

    :param rows: Trade rows as lists of string fields.
    :param numeric_errors: Policy for unparseable buy/sale prices.
    :param duplicate_policy: Policy for rows after a closed round trip.
    :returns: User summaries keyed by user id plus any non-fatal issues.
    :raises CSVParseError: If a row has fewer than five fields.
    :raises TradeSequenceError: On a duplicate row under ``reject``.
    :raises NumberParseError: On a bad price under the ``raise`` policy.
    """
    policy = NumericErrorPolicy(numeric_errors)
    duplicates = DuplicateTradePolicy(duplicate_policy)
    users: dict[str, UserSummary] = {}
    issues: list[ParseIssue] = []

    for record_number, row in enumerate(rows, start=1):
        if len(row) < _MIN_FIELDS:
            raise CSVParseError(
                f"trades record {record_number}: expected at least {_MIN_FIELDS} fields, "
                f"got {len(row)}"
            )

        user_id = row[USER_COL]
        instrument = row[INSTRUMENT_COL]

        user = users.get(user_id)
        if user is None:
            user = UserSummary(user_id=UserId(user_id))
            users[user_id] = user

        ticker = user.tickers.get(instrument)

        if ticker is None:
            buy_price = resolve_price(
                row, BUY_PRICE_COL,
                source="trades", record_number=record_number, policy=policy, issues=issues,
            )
            user.tickers[instrument] = UserTicker(
                instrument=Instrument(instrument), buy_price=buy_price
            )
            continue

        if ticker.state == TradeState.CLOSED:
            if duplicates is DuplicateTradePolicy.REJECT:
                raise TradeSequenceError(
                    f"trades record {record_number}: round trip for user {user_id!r} "
                    f"on {instrument!r} is already closed"
                )
            if duplicates is DuplicateTradePolicy.IGNORE:
                issues.append(
                    ParseIssue(
                        source="trades",
                        record_number=record_number,
                        message=(
                            f"ignored row for closed round trip "
                            f"(user {user_id!r}, instrument {instrument!r})"
                        ),
                    )
                )
                continue

        sale_price = resolve_price(
            row, SALE_PRICE_COL,
            source="trades", record_number=record_number, policy=policy, issues=issues,
        )
        ticker.close(sale_price)

    log.debug("Aggregated trades for %d users", len(users))
    return TradeAggregation(users=users, issues=issues)
