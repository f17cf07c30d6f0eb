"""Input file ingestion module."""

from income_report.data.sources import CSVRowSource, Row, read_inputs

__all__ = [
    "CSVRowSource",
    "Row",
    "read_inputs",
]
