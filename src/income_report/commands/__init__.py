"""CLI command implementations for the income report.

Each command module provides:
- Configuration loading and validation
- Command execution logic
"""

from income_report.commands.build_report import load_report_config, run_report

__all__ = [
    "load_report_config",
    "run_report",
]
