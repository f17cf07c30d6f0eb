#!/usr/bin/env python3
"""Command-line interface for the income report."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

log = logging.getLogger("income_report")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="income-report",
        description=(
            "Compare each user's realized income per instrument with the "
            "maximum income the candle data allowed."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--candles", help="Candle CSV (default: candles_5m.csv)")
    parser.add_argument("--trades", help="User trade CSV (default: user_trades.csv)")
    parser.add_argument("-o", "--output", help="Report CSV (default: output.csv)")
    parser.add_argument(
        "--sort", action="store_true", help="Sort rows by user and instrument"
    )
    parser.add_argument(
        "--header", action="store_true", help="Write a header line to the report"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    :param argv: Arguments to parse (default: ``sys.argv[1:]``).
    :returns: 0 on success, 1 on any fatal error.
    """
    from income_report.commands.build_report import (load_report_config,
                                                     run_report)
    from income_report.exceptions import IncomeReportError
    from income_report.types import ReportConfig

    args = _build_parser().parse_args(argv)

    try:
        config = load_report_config(args.config) if args.config else ReportConfig()
    except IncomeReportError as e:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)
        log.error("Configuration error: %s", e)
        return 1

    overrides: dict[str, Any] = {}
    if args.candles:
        overrides["candles_path"] = Path(args.candles)
    if args.trades:
        overrides["trades_path"] = Path(args.trades)
    if args.output:
        overrides["output_path"] = Path(args.output)
    if args.sort:
        overrides["sort_rows"] = True
    if args.header:
        overrides["include_header"] = True
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    if overrides:
        config = config.model_copy(update=overrides)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = run_report(config)
    except IncomeReportError as e:
        log.error("%s", e)
        return 1

    if result.issues:
        log.info(
            "Report written to %s with %d warning(s)",
            result.output_path,
            len(result.issues),
        )
    else:
        log.info("Report written to %s", result.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
