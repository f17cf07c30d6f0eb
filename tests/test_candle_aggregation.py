"""Tests for candle aggregation."""

import math
import random
from datetime import datetime, timedelta, timezone

import pytest

from income_report.aggregation.candles import aggregate_candles
from income_report.aggregation.prices import parse_price
from income_report.exceptions import (CSVParseError, NumberParseError,
                                      TimestampParseError)


def _ts(minutes: int) -> str:
    ts = datetime(2023, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


class TestParsePrice:
    """Tests for price parsing."""

    @pytest.mark.parametrize(
        "text,expected", [("100", 100.0), ("-1.5", -1.5), ("1e3", 1000.0), ("0.1", 0.1)]
    )
    def test_valid_numbers(self, text: str, expected: float) -> None:
        assert parse_price(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", " 1.0", "1.0 ", "1_000", "1,5"])
    def test_invalid_numbers_fall_back_to_zero(self, text: str) -> None:
        with pytest.raises(NumberParseError) as exc_info:
            parse_price(text)
        assert exc_info.value.value == 0.0

    def test_overflow_reports_infinity(self) -> None:
        with pytest.raises(NumberParseError, match="out of float range") as exc_info:
            parse_price("-1e400")
        assert exc_info.value.value == -math.inf

    def test_explicit_infinity_accepted(self) -> None:
        assert parse_price("Inf") == math.inf


class TestAggregateCandles:
    """Tests for aggregate_candles."""

    def test_concrete_scenario(self) -> None:
        """Two BTC candles give min 90 at 00:00 and max 120 at 00:05."""
        result = aggregate_candles(
            [
                ["BTC", "2023-01-01T00:00:00Z", "100", "90"],
                ["BTC", "2023-01-01T00:05:00Z", "120", "95"],
            ]
        )

        btc = result.summaries["BTC"]
        assert btc.min_price == 90.0
        assert btc.min_price_time == datetime(2023, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert btc.max_price == 120.0
        assert btc.max_price_time == datetime(2023, 1, 1, 0, 5, tzinfo=timezone.utc)
        assert btc.income == 30.0
        assert result.issues == []

    def test_instruments_are_independent(self) -> None:
        result = aggregate_candles(
            [
                ["BTC", _ts(0), "100", "90"],
                ["ETH", _ts(0), "10", "9"],
                ["BTC", _ts(5), "101", "91"],
            ]
        )

        assert set(result.summaries) == {"BTC", "ETH"}
        assert result.summaries["ETH"].income == 1.0
        assert result.summaries["BTC"].income == 11.0

    def test_trailing_columns_ignored(self) -> None:
        result = aggregate_candles([["BTC", _ts(0), "100", "90", "95", "1234"]])

        assert result.summaries["BTC"].income == 10.0

    def test_first_seen_wins_ties(self) -> None:
        """Equal extremes later in the file keep the earlier timestamp."""
        result = aggregate_candles(
            [
                ["BTC", _ts(0), "100", "90"],
                ["BTC", _ts(5), "95", "92"],
                ["BTC", _ts(10), "100", "90"],
            ]
        )

        btc = result.summaries["BTC"]
        assert btc.max_price_time == datetime(2023, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert btc.min_price_time == datetime(2023, 1, 1, 0, 0, tzinfo=timezone.utc)

    def test_extremes_match_max_and_min_of_inputs(self) -> None:
        """max_price/min_price are the max high/min low over all rows."""
        rng = random.Random(7)
        highs = [rng.uniform(100, 200) for _ in range(50)]
        lows = [rng.uniform(0, 100) for _ in range(50)]
        rows = [
            ["X", _ts(5 * i), repr(h), repr(lo)]
            for i, (h, lo) in enumerate(zip(highs, lows))
        ]

        x = aggregate_candles(rows).summaries["X"]

        assert x.max_price == max(highs)
        assert x.min_price == min(lows)
        assert x.income == x.max_price - x.min_price
        assert x.max_price_time == datetime(
            2023, 1, 1, tzinfo=timezone.utc
        ) + timedelta(minutes=5 * highs.index(max(highs)))
        assert x.min_price_time == datetime(
            2023, 1, 1, tzinfo=timezone.utc
        ) + timedelta(minutes=5 * lows.index(min(lows)))

    def test_empty_input(self) -> None:
        result = aggregate_candles([])
        assert result.summaries == {}
        assert result.issues == []

    def test_bad_timestamp_aborts(self) -> None:
        """A single unparseable timestamp fails the whole aggregation."""
        with pytest.raises(TimestampParseError, match="candles record 2"):
            aggregate_candles(
                [
                    ["BTC", _ts(0), "100", "90"],
                    ["BTC", "yesterday", "120", "95"],
                    ["BTC", _ts(10), "130", "80"],
                ]
            )

    def test_bad_price_is_logged_and_zero_is_used(self) -> None:
        """Under the default policy a bad price becomes an issue and 0.0.

        This keeps the lenient numeric handling: the row still counts, so a
        bad low price drags the minimum to zero.
        """
        result = aggregate_candles(
            [
                ["BTC", _ts(0), "100", "90"],
                ["BTC", _ts(5), "110", "n/a"],
            ]
        )

        btc = result.summaries["BTC"]
        assert btc.min_price == 0.0
        assert btc.max_price == 110.0
        assert btc.income == 110.0
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.source == "candles"
        assert issue.record_number == 2
        assert issue.column == 3
        assert issue.value == "n/a"

    def test_bad_price_raises_under_raise_policy(self) -> None:
        with pytest.raises(NumberParseError, match="candles record 1, column 2"):
            aggregate_candles([["BTC", _ts(0), "oops", "90"]], numeric_errors="raise")

    def test_short_row_raises(self) -> None:
        with pytest.raises(CSVParseError, match="at least 4 fields"):
            aggregate_candles([["BTC", _ts(0), "100"]])

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValueError):
            aggregate_candles([], numeric_errors="sometimes")
