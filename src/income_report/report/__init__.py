"""Report assembly and output module."""

from income_report.report.formatter import format_report
from income_report.report.writer import REPORT_HEADER, write_report_csv

__all__ = [
    "format_report",
    "write_report_csv",
    "REPORT_HEADER",
]
