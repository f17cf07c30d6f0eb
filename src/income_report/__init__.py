"""Income report package root."""

from income_report.exceptions import IncomeReportError

__version__ = "0.1.0"

__all__ = ["IncomeReportError", "__version__"]
