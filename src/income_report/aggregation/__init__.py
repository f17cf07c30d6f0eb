"""Candle and user trade aggregation module."""

from income_report.aggregation.candles import aggregate_candles
from income_report.aggregation.prices import parse_price
from income_report.aggregation.trades import aggregate_trades

__all__ = [
    "aggregate_candles",
    "aggregate_trades",
    "parse_price",
]
