"""
pulse/validators/field_parser.py

Cell-level type coercion for CSV normalization.

Numeric parsers never raise: a missing, empty, or non-numeric cell becomes 0
and the substitution is logged at DEBUG.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})(\d{2})?$")
_ORDINAL_SUFFIX = re.compile(r"(\d{1,2})(st|nd|rd|th)\b", re.IGNORECASE)
_EPOCH_MS_FLOOR = 946_684_800_000  # 2000-01-01T00:00:00Z


def _clean_numeric(value: Any) -> tuple[str, bool]:
    text = str(value).strip().replace(",", "")
    if text.endswith("%"):
        return text[:-1].strip(), True
    return text, False


def _coercion_default(column: str | None, value: Any) -> None:
    logger.debug("Field coercion default applied column=%s value=%r", column, value)


def parse_float(value: Any, *, column: str | None = None) -> float:
    """
    Parse a float cell; ``%`` signs and thousands separators are stripped.
    """

    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        text, _ = _clean_numeric(value)
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            _coercion_default(column, value)
            return 0.0
    if not math.isfinite(number):
        _coercion_default(column, value)
        return 0.0
    return number


def parse_int(value: Any, *, column: str | None = None) -> int:
    """
    Parse a count cell. Fractions are truncated and negatives clamp to 0.
    """

    number = parse_float(value, column=column)
    count = int(number)
    if count < 0:
        _coercion_default(column, value)
        return 0
    return count


def parse_rate(value: Any, *, column: str | None = None) -> float:
    """
    Parse a rate cell into a 0-100 percentage.

    Plain numbers are 0-1 fractions and get expanded; a value written with a
    trailing ``%`` is already a percentage.
    """

    if value is None:
        return 0.0
    if isinstance(value, str):
        _, is_percentage = _clean_numeric(value)
        if is_percentage:
            return parse_float(value, column=column)
    return parse_float(value, column=column) * 100.0


def parse_text(value: Any, *, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def parse_date(value: Any) -> date | None:
    """
    Parse a record date cell into a calendar date, or ``None`` when unparsable.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    compact = _COMPACT_DATE.match(text)
    if compact:
        try:
            return date(int(compact.group(1)), int(compact.group(2)), int(compact.group(3)))
        except ValueError:
            pass

    if text.isdigit() and int(text) > _EPOCH_MS_FLOOR:
        try:
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(iso_text).date()
    except ValueError:
        pass

    cleaned = _ORDINAL_SUFFIX.sub(r"\1", text).replace(",", " ")
    cleaned = " ".join(cleaned.split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None
