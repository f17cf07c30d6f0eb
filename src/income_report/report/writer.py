"""CSV serialization of the income report."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable

from income_report.exceptions import ReportWriteError
from income_report.types import ReportRow

log = logging.getLogger(__name__)

REPORT_HEADER = [
    "userId",
    "instrument",
    "userIncome",
    "maxIncome",
    "shortfall",
    "saleWindowEnd",
    "saleWindowStart",
]


def write_report_csv(
    rows: Iterable[ReportRow],
    path: str | Path,
    include_header: bool = False,
) -> int:
    """Write report rows to ``path``, creating or truncating it.

    :param rows: Rows to write.
    :param path: Output file path.
    :param include_header: Whether to write :data:`REPORT_HEADER` first.
    :returns: Number of report rows written (header excluded).
    :raises ReportWriteError: If the file cannot be created or written.
    """
    path = Path(path)
    count = 0
    try:
        with path.open(
            "w", newline="", encoding="utf-8", errors="surrogateescape"
        ) as f:
            w = csv.writer(f, lineterminator="\n")
            if include_header:
                w.writerow(REPORT_HEADER)
            for row in rows:
                w.writerow(row.to_fields())
                count += 1
    except OSError as e:
        raise ReportWriteError(f"Unable to write {path}: {e}") from e

    log.info("Wrote %d report rows to %s", count, path)
    return count
