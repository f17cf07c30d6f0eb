"""Price field parsing shared by the aggregators."""

from __future__ import annotations

import math

from income_report.exceptions import NumberParseError
from income_report.types import NumericErrorPolicy, ParseIssue


def parse_price(text: str) -> float:
    """Parse a price field as a 64-bit float.

    Surrounding whitespace and digit-group underscores are rejected, and
    finite literals that overflow to infinity are reported as out of range.

    :param text: Field text.
    :returns: Parsed value.
    :raises NumberParseError: If the text is not a valid number. The error's
        ``value`` is ``0.0`` for syntax errors and the signed infinity for
        out-of-range values.
    """
    if text != text.strip() or "_" in text:
        raise NumberParseError(f"unable to convert {text!r} to float", text=text)

    try:
        value = float(text)
    except ValueError as e:
        raise NumberParseError(f"unable to convert {text!r} to float", text=text) from e

    if math.isinf(value) and "inf" not in text.lower():
        raise NumberParseError(
            f"value {text!r} out of float range", text=text, value=value
        )
    return value


def resolve_price(
    row: list[str],
    column: int,
    *,
    source: str,
    record_number: int,
    policy: NumericErrorPolicy,
    issues: list[ParseIssue],
) -> float:
    """Parse ``row[column]`` as a price under the given error policy.

    With ``NumericErrorPolicy.LOG`` a failure is appended to ``issues`` and the
    failed parse's fallback value is returned.

    :raises NumberParseError: On failure under ``NumericErrorPolicy.RAISE``.
    """
    text = row[column]
    try:
        return parse_price(text)
    except NumberParseError as e:
        if policy is NumericErrorPolicy.RAISE:
            raise NumberParseError(
                f"{source} record {record_number}, column {column}: {e}",
                text=e.text,
                value=e.value,
            ) from e
        issues.append(
            ParseIssue(
                source=source,
                record_number=record_number,
                column=column,
                value=text,
                message=str(e),
            )
        )
        return e.value
