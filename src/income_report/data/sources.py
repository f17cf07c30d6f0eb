"""CSV ingestion for the candle and user trade inputs.

Rows are returned as plain lists of string fields. Column meaning is applied
downstream by the aggregators; this module only guarantees well-formed CSV.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterator

from income_report.exceptions import CSVParseError, FileOpenError

log = logging.getLogger(__name__)

Row = list[str]

_QUOTE = '"'


class CSVRowSource:
    """Reads every record of a CSV file.

    Quoting is strict: a quote may only open a field, close it, or appear
    doubled inside a quoted field. Every record must have as many fields as
    the first one. Blank lines are skipped.

    :param file_path: Path to the CSV file.
    :param delimiter: Field delimiter (default: ",").
    """

    def __init__(self, file_path: str | Path, delimiter: str = ",") -> None:
        self.file_path = Path(file_path)
        self.delimiter = delimiter

    def fetch_rows(self) -> list[Row]:
        """Read all records from the file.

        Bytes that are not valid UTF-8 are carried through as surrogate
        escapes so the report writer can emit them unchanged.

        :returns: Records in file order.
        :raises FileOpenError: If the file cannot be opened.
        :raises CSVParseError: If the file is not well-formed CSV.
        """
        try:
            f = open(
                self.file_path, newline="", encoding="utf-8", errors="surrogateescape"
            )
        except OSError as e:
            raise FileOpenError(f"Unable to open file {self.file_path}: {e}") from e

        rows: list[Row] = []
        expected_fields: int | None = None
        # Raw lines consumed by the reader for the record being parsed.
        raw_lines: list[str] = []

        def tee_lines() -> Iterator[str]:
            for line in f:
                raw_lines.append(line)
                yield line

        with f:
            reader = csv.reader(tee_lines(), delimiter=self.delimiter, strict=True)
            try:
                for row in reader:
                    record_lines = raw_lines[:]
                    raw_lines.clear()
                    if not row:
                        continue

                    offset = _bare_quote_line(record_lines, self.delimiter)
                    if offset is not None:
                        first_line = reader.line_num - len(record_lines) + 1
                        raise CSVParseError(
                            f"{self.file_path} line {first_line + offset}: "
                            f'bare " in non-quoted field'
                        )

                    if expected_fields is None:
                        expected_fields = len(row)
                    elif len(row) != expected_fields:
                        raise CSVParseError(
                            f"{self.file_path} line {reader.line_num}: "
                            f"wrong number of fields ({len(row)}, expected {expected_fields})"
                        )
                    rows.append(row)
            except csv.Error as e:
                raise CSVParseError(
                    f"{self.file_path} line {reader.line_num}: {e}"
                ) from e
            except OSError as e:
                raise CSVParseError(f"Unable to read {self.file_path}: {e}") from e

        log.debug("Read %d records from %s", len(rows), self.file_path)
        return rows


def _bare_quote_line(lines: list[str], delimiter: str) -> int | None:
    """Find a quote that does not open a field in the raw text of one record.

    A quote is only legal as the first character of a field, as the closing
    quote of a quoted field, or doubled inside a quoted field.

    :param lines: Raw lines making up the record.
    :param delimiter: Field delimiter.
    :returns: 0-based index of the offending line, or None.
    """
    start, unquoted, quoted, after_close = range(4)
    state = start
    for index, line in enumerate(lines):
        for ch in line:
            if state == quoted:
                if ch == _QUOTE:
                    state = after_close
            elif ch == delimiter or ch in "\r\n":
                state = start
            elif ch == _QUOTE:
                if state == unquoted:
                    return index
                state = quoted
            elif state == start:
                state = unquoted
    return None


def read_inputs(
    candles_path: str | Path,
    trades_path: str | Path,
) -> tuple[list[Row], list[Row]]:
    """Read the candle and user trade files.

    :param candles_path: Candle CSV path.
    :param trades_path: User trade CSV path.
    :returns: ``(candle_rows, trade_rows)``.
    :raises FileOpenError: If either file cannot be opened.
    :raises CSVParseError: If either file is not well-formed CSV.
    """
    candle_rows = CSVRowSource(candles_path).fetch_rows()
    trade_rows = CSVRowSource(trades_path).fetch_rows()
    log.info(
        "Loaded %d candle rows and %d trade rows", len(candle_rows), len(trade_rows)
    )
    return candle_rows, trade_rows
