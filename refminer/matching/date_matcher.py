"""Matcher for date-valued attributes."""

import re
from datetime import datetime
from typing import List, Optional, Tuple

from refminer.models import (
    DateValue,
    Statement,
    PRECISION_DAY,
    PRECISION_MONTH,
    PRECISION_YEAR,
    normalize_text,
)
from .base_matcher import BaseMatcher, MatcherRule

# Accepted record formats, most specific first
DATE_FORMATS: Tuple[Tuple[str, int], ...] = (
    ("%Y-%m-%d", PRECISION_DAY),
    ("%d %B %Y", PRECISION_DAY),
    ("%d %b %Y", PRECISION_DAY),
    ("%B %d, %Y", PRECISION_DAY),
    ("%b %d, %Y", PRECISION_DAY),
    ("%B %d %Y", PRECISION_DAY),
    ("%Y-%m", PRECISION_MONTH),
    ("%B %Y", PRECISION_MONTH),
    ("%b %Y", PRECISION_MONTH),
    ("%Y", PRECISION_YEAR),
)

_ISO_DATETIME = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]\d{2}:\d{2}")


def parse_date(text: str) -> Optional[DateValue]:
    """
    Parse record text into a DateValue.

    Args:
        text: e.g. "14 June 1946", "1946-06-14", "1946-06-14T00:00:00Z", "1946"

    Returns:
        DateValue with the precision implied by the format, or None
    """
    text = normalize_text(text or "")
    iso = _ISO_DATETIME.match(text)
    if iso:
        text = iso.group(1)

    for fmt, precision in DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return DateValue(
            year=parsed.year,
            month=parsed.month if precision >= PRECISION_MONTH else 0,
            day=parsed.day if precision >= PRECISION_DAY else 0,
            precision=precision,
        )
    return None


def dates_match(record_date: DateValue, entity_date: DateValue) -> bool:
    """
    Compare at the coarser of the two precisions.

    A record less precise than the entity's value never matches: "1946"
    does not corroborate 14 June 1946, but "14 June 1946" corroborates 1946.
    """
    if record_date.precision < entity_date.precision:
        return False
    precision = min(record_date.precision, entity_date.precision)
    return record_date.truncated(precision) == entity_date.truncated(precision)


class DateMatcher(BaseMatcher):
    """Parse record dates and compare them to the entity's date values."""

    kind = "date"

    def statement_matches(self, rule: MatcherRule, statement: Statement, values: List[str]) -> bool:
        if not isinstance(statement.value, DateValue):
            return False
        for value in values:
            record_date = parse_date(value)
            if record_date is not None and dates_match(record_date, statement.value):
                return True
        return False
