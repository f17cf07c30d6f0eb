"""Core type definitions for the income report.

All data models use Pydantic BaseModel for automatic validation, JSON
serialization, and better error messages.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

from income_report.time_utils import format_report_timestamp

# Type aliases for domain-specific identifiers
Instrument = NewType("Instrument", str)
UserId = NewType("UserId", str)


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


class MutableModel(BaseModel):
    """Base model for mutable state objects."""

    model_config = ConfigDict(validate_assignment=True)


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class NumericErrorPolicy(str, Enum):
    """How unparseable price fields are handled."""

    LOG = "log"
    RAISE = "raise"


class DuplicateTradePolicy(str, Enum):
    """How a trade row for an already closed (user, instrument) pair is handled."""

    OVERWRITE = "overwrite"
    IGNORE = "ignore"
    REJECT = "reject"


# ---------------------------------------------------------------------------
# Candle Types
# ---------------------------------------------------------------------------


class CandleSummary(MutableModel):
    """Observed price extremes for one instrument.

    :param name: Instrument identifier.
    :param min_price: Lowest low price seen so far.
    :param min_price_time: Timestamp of the row that set ``min_price``.
    :param max_price: Highest high price seen so far.
    :param max_price_time: Timestamp of the row that set ``max_price``.
    :param income: Theoretical maximum income, ``max_price - min_price``.
    """

    name: Instrument
    min_price: float
    min_price_time: datetime
    max_price: float
    max_price_time: datetime
    income: float

    @classmethod
    def first_seen(
        cls,
        name: Instrument,
        timestamp: datetime,
        high: float,
        low: float,
    ) -> CandleSummary:
        """Create a summary from the first candle of an instrument."""
        return cls(
            name=name,
            min_price=low,
            min_price_time=timestamp,
            max_price=high,
            max_price_time=timestamp,
            income=high - low,
        )

    def observe(self, timestamp: datetime, high: float, low: float) -> None:
        """Fold another candle into the summary.

        Only strictly lower lows and strictly higher highs replace the current
        extremes, so the earliest row wins ties.
        """
        if low < self.min_price:
            self.min_price = low
            self.min_price_time = timestamp
        if high > self.max_price:
            self.max_price = high
            self.max_price_time = timestamp
        self.income = self.max_price - self.min_price


# ---------------------------------------------------------------------------
# User Trade Types
# ---------------------------------------------------------------------------


class TradeState(str, Enum):
    """Lifecycle of a (user, instrument) round trip."""

    AWAITING_SALE = "awaiting_sale"
    CLOSED = "closed"


class UserTicker(MutableModel):
    """One user's round trip on one instrument.

    :param instrument: Instrument traded.
    :param buy_price: Price of the opening buy row.
    :param sale_price: Price of the closing sale row, once seen.
    :param income: Realized income ``sale_price - buy_price``, once closed.
    :param state: Whether the round trip is still waiting for its sale.
    """

    instrument: Instrument
    buy_price: float
    sale_price: float | None = None
    income: float | None = None
    state: TradeState = TradeState.AWAITING_SALE

    def close(self, sale_price: float) -> None:
        """Record the sale leg and realize the income."""
        self.sale_price = sale_price
        self.income = sale_price - self.buy_price
        self.state = TradeState.CLOSED


class UserSummary(MutableModel):
    """All round trips of one user, keyed by instrument.

    :param user_id: User identifier.
    :param tickers: Round trips keyed by instrument.
    """

    user_id: UserId
    tickers: dict[str, UserTicker] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Aggregation Results
# ---------------------------------------------------------------------------


class ParseIssue(FrozenModel):
    """A non-fatal problem found while aggregating an input row.

    :param source: Which input the row came from ("candles" or "trades").
    :param record_number: 1-based record number within the input file;
        blank lines are not counted.
    :param column: 0-based column index of the offending field, if any.
    :param value: The offending field text.
    :param message: Human-readable description.
    """

    source: str
    record_number: int
    column: int | None = None
    value: str = ""
    message: str

    def __str__(self) -> str:
        return f"{self.source} record {self.record_number}: {self.message}"


class CandleAggregation(FrozenModel):
    """Result of aggregating candle rows.

    :param summaries: Candle summaries keyed by instrument.
    :param issues: Non-fatal problems encountered.
    """

    summaries: dict[str, CandleSummary] = Field(default_factory=dict)
    issues: list[ParseIssue] = Field(default_factory=list)


class TradeAggregation(FrozenModel):
    """Result of aggregating user trade rows.

    :param users: User summaries keyed by user id.
    :param issues: Non-fatal problems encountered.
    """

    users: dict[str, UserSummary] = Field(default_factory=dict)
    issues: list[ParseIssue] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Report Types
# ---------------------------------------------------------------------------


class ReportRow(FrozenModel):
    """One line of the income report.

    :param user_id: User the row belongs to.
    :param instrument: Instrument traded.
    :param user_income: Realized income (0.0 if the trade never closed).
    :param max_income: Theoretical maximum income for the instrument.
    :param shortfall: ``max_income - user_income``.
    :param sale_window_end: Time of the instrument's highest price.
    :param sale_window_start: Time of the instrument's lowest price.
    """

    user_id: UserId
    instrument: Instrument
    user_income: float
    max_income: float
    shortfall: float
    sale_window_end: datetime | None = None
    sale_window_start: datetime | None = None

    def to_fields(self) -> list[str]:
        """Render the row as CSV fields."""
        return [
            str(self.user_id),
            str(self.instrument),
            f"{self.user_income:.2f}",
            f"{self.max_income:.2f}",
            f"{self.shortfall:.2f}",
            format_report_timestamp(self.sale_window_end),
            format_report_timestamp(self.sale_window_start),
        ]


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class ReportConfig(FrozenModel):
    """Configuration for building the income report.

    :param candles_path: Candle CSV input.
    :param trades_path: User trade CSV input.
    :param output_path: Report CSV output.
    :param include_header: Whether to write a header line.
    :param sort_rows: Sort rows by (user, instrument) instead of input order.
    :param numeric_errors: Policy for unparseable prices.
    :param duplicate_trades: Policy for rows after a closed round trip.
    :param log_level: Logging level.
    """

    candles_path: Path = Path("candles_5m.csv")
    trades_path: Path = Path("user_trades.csv")
    output_path: Path = Path("output.csv")
    include_header: bool = False
    sort_rows: bool = False
    numeric_errors: NumericErrorPolicy = NumericErrorPolicy.LOG
    duplicate_trades: DuplicateTradePolicy = DuplicateTradePolicy.OVERWRITE
    log_level: str = "INFO"


class ReportResult(FrozenModel):
    """Outcome of a completed report run.

    :param output_path: Where the report was written.
    :param rows_written: Number of report rows written.
    :param issues: Non-fatal problems from both aggregations.
    """

    output_path: Path
    rows_written: int
    issues: list[ParseIssue] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    # Type aliases
    "Instrument",
    "UserId",
    # Base models
    "FrozenModel",
    "MutableModel",
    # Policies
    "NumericErrorPolicy",
    "DuplicateTradePolicy",
    # Candles
    "CandleSummary",
    # User trades
    "TradeState",
    "UserTicker",
    "UserSummary",
    # Aggregation results
    "ParseIssue",
    "CandleAggregation",
    "TradeAggregation",
    # Report
    "ReportRow",
    # Configuration
    "ReportConfig",
    "ReportResult",
]
