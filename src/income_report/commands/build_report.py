"""Configuration and execution for the build-report command.

Example config file (report.yaml):

    inputs:
      candles: "candles_5m.csv"
      trades: "user_trades.csv"
    output:
      path: "output.csv"
      include_header: false
      sort_rows: false
    policies:
      numeric_errors: "log"  # log | raise
      duplicate_trades: "overwrite"  # overwrite | ignore | reject
    logging:
      level: "INFO"

Every section is optional; omitted keys fall back to the defaults above.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from income_report.aggregation import aggregate_candles, aggregate_trades
from income_report.data import read_inputs
from income_report.exceptions import ConfigError
from income_report.report import format_report, write_report_csv
from income_report.types import (DuplicateTradePolicy, NumericErrorPolicy,
                                 ReportConfig, ReportResult)

log = logging.getLogger(__name__)

# Valid log levels
VALID_LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

VALID_NUMERIC_POLICIES = frozenset(p.value for p in NumericErrorPolicy)
VALID_DUPLICATE_POLICIES = frozenset(p.value for p in DuplicateTradePolicy)


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return an optional mapping section, defaulting to empty."""
    section = raw_config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _path(section: dict[str, Any], key: str, label: str) -> Path | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{label}' must be a non-empty string")
    return Path(value)


def _flag(section: dict[str, Any], key: str, label: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{label}' must be a boolean")
    return value


def load_report_config(config_path: str | Path) -> ReportConfig:
    """Parse and validate a report configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated ReportConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    # Read and parse YAML
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    # An empty file means "all defaults"
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    overrides: dict[str, Any] = {}

    # Parse inputs
    raw_inputs = _section(raw_config, "inputs")
    candles_path = _path(raw_inputs, "candles", "inputs.candles")
    if candles_path is not None:
        overrides["candles_path"] = candles_path
    trades_path = _path(raw_inputs, "trades", "inputs.trades")
    if trades_path is not None:
        overrides["trades_path"] = trades_path

    # Parse output
    raw_output = _section(raw_config, "output")
    output_path = _path(raw_output, "path", "output.path")
    if output_path is not None:
        overrides["output_path"] = output_path
    overrides["include_header"] = _flag(
        raw_output, "include_header", "output.include_header", False
    )
    overrides["sort_rows"] = _flag(raw_output, "sort_rows", "output.sort_rows", False)

    # Parse policies
    raw_policies = _section(raw_config, "policies")

    numeric_errors = str(raw_policies.get("numeric_errors", "log")).lower()
    if numeric_errors not in VALID_NUMERIC_POLICIES:
        raise ConfigError(
            f"Invalid numeric_errors policy '{numeric_errors}'. "
            f"Valid options: {sorted(VALID_NUMERIC_POLICIES)}"
        )
    overrides["numeric_errors"] = NumericErrorPolicy(numeric_errors)

    duplicate_trades = str(raw_policies.get("duplicate_trades", "overwrite")).lower()
    if duplicate_trades not in VALID_DUPLICATE_POLICIES:
        raise ConfigError(
            f"Invalid duplicate_trades policy '{duplicate_trades}'. "
            f"Valid options: {sorted(VALID_DUPLICATE_POLICIES)}"
        )
    overrides["duplicate_trades"] = DuplicateTradePolicy(duplicate_trades)

    # Parse logging (optional)
    raw_logging = _section(raw_config, "logging")
    log_level = str(raw_logging.get("level", "INFO")).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Invalid log level '{log_level}'. "
            f"Valid options: {sorted(VALID_LOG_LEVELS)}"
        )
    overrides["log_level"] = log_level

    return ReportConfig(**overrides)


def run_report(config: ReportConfig) -> ReportResult:
    """Run the full pipeline: read, aggregate, join, write.

    Non-fatal issues from both aggregations are logged once, here, and
    returned in the result.

    :param config: Report configuration.
    :returns: Summary of the completed run.
    :raises IncomeReportError: On any fatal error; see the exceptions module.
    """
    candle_rows, trade_rows = read_inputs(config.candles_path, config.trades_path)

    candles = aggregate_candles(candle_rows, numeric_errors=config.numeric_errors)
    log.info("Aggregated %d instruments from %s", len(candles.summaries), config.candles_path)

    trades = aggregate_trades(
        trade_rows,
        numeric_errors=config.numeric_errors,
        duplicate_policy=config.duplicate_trades,
    )
    log.info("Aggregated %d users from %s", len(trades.users), config.trades_path)

    issues = [*candles.issues, *trades.issues]
    for issue in issues:
        log.warning("%s", issue)

    rows = format_report(candles.summaries, trades.users, sort_rows=config.sort_rows)
    written = write_report_csv(rows, config.output_path, include_header=config.include_header)

    return ReportResult(
        output_path=config.output_path,
        rows_written=written,
        issues=issues,
    )
