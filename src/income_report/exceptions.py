"""Income report exception hierarchy.

All report-specific exceptions derive from :class:`IncomeReportError` so callers
can catch every pipeline failure uniformly.
"""

from __future__ import annotations


class IncomeReportError(Exception):
    """Base class for income-report exceptions.

    Derived exceptions should extend this class so that callers can catch all
    pipeline errors uniformly.
    """


class ConfigError(IncomeReportError):
    """Raised when configuration files or parameters are invalid."""


class DataSourceError(IncomeReportError):
    """Raised when reading an input file fails."""


class FileOpenError(DataSourceError):
    """Raised when an input file cannot be opened."""


class CSVParseError(DataSourceError):
    """Raised when an input file is not well-formed CSV."""


class DataValidationError(IncomeReportError):
    """Raised when a field of an input row fails validation.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


class TimestampParseError(DataValidationError):
    """Raised when a candle timestamp is not valid RFC 3339."""


class NumberParseError(DataValidationError):
    """Raised when a price field is not a valid floating point number.

    :param message: Human-readable description.
    :param text: The offending field text.
    :param value: The value a failed parse yields (``0.0``).
    """

    def __init__(self, message: str, text: str = "", value: float = 0.0) -> None:
        super().__init__(message)
        self.text = text
        self.value = value


class TradeSequenceError(DataValidationError):
    """Raised when a trade row arrives for an already closed round trip."""


class ReportWriteError(IncomeReportError):
    """Raised when the output report cannot be created or written."""


__all__ = [
    "IncomeReportError",
    "ConfigError",
    "DataSourceError",
    "FileOpenError",
    "CSVParseError",
    "DataValidationError",
    "TimestampParseError",
    "NumberParseError",
    "TradeSequenceError",
    "ReportWriteError",
]
