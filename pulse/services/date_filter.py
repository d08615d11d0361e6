"""
pulse/services/date_filter.py

Inclusive date-range selection over normalized records.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Sequence, TypeVar

from pulse.domain.date_range import DateRange
from pulse.validators.field_parser import parse_date

logger = logging.getLogger(__name__)

R = TypeVar("R")

MIN_PLAUSIBLE_YEAR = 2000


def record_date(record: Any, field: str = "date") -> date | None:
    """
    Parse the date attribute of *record*; ``None`` when it cannot be dated.
    """

    return parse_date(getattr(record, field, None))


def filter_by_date_range(records: Iterable[R], date_range: DateRange, field: str = "date") -> list[R]:
    """
    Keep records dated within ``date_range``, both ends included.

    Records with an unparsable date are excluded. Input order is preserved.
    """

    kept: list[R] = []
    skipped = 0
    for record in records:
        parsed = record_date(record, field)
        if parsed is None:
            skipped += 1
            continue
        if date_range.contains(parsed):
            kept.append(record)
    if skipped:
        logger.debug("Excluded undatable records count=%s field=%s", skipped, field)
    return kept


def available_date_range(
    record_sets: Iterable[Sequence[Any]],
    field: str = "date",
    *,
    today: date | None = None,
) -> DateRange | None:
    """
    Span of every plausible date across ``record_sets``, or ``None`` when there is none.

    Dates outside ``2000..next year`` are ignored as misparsed.
    """

    max_year = (today or date.today()).year + 1
    earliest: date | None = None
    latest: date | None = None
    for records in record_sets:
        for record in records:
            parsed = record_date(record, field)
            if parsed is None or not (MIN_PLAUSIBLE_YEAR <= parsed.year <= max_year):
                continue
            if earliest is None or parsed < earliest:
                earliest = parsed
            if latest is None or parsed > latest:
                latest = parsed
    if earliest is None or latest is None:
        return None
    return DateRange(start=earliest, end=latest)
