"""
pulse/domain/date_range.py

Inclusive calendar date ranges and comparison periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive ``[start, end]`` range of calendar dates.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"DateRange start {self.start.isoformat()} is after end {self.end.isoformat()}."
            )

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end

    def previous_period(self) -> DateRange:
        """
        Range of equal length ending the day before ``start``.
        """

        new_end = self.start - timedelta(days=1)
        return DateRange(start=new_end - (self.end - self.start), end=new_end)

    def same_period_last_year(self) -> DateRange:
        """
        The same calendar span one year earlier; Feb 29 maps to Feb 28.
        """

        return DateRange(start=_shift_year(self.start, -1), end=_shift_year(self.end, -1))

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class ComparisonSpec:
    """
    Primary range plus an optional comparison range of any length.
    """

    current: DateRange
    comparison: DateRange | None = None

    @property
    def enabled(self) -> bool:
        return self.comparison is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "current": self.current.to_dict(),
            "comparison": self.comparison.to_dict() if self.comparison else None,
        }


def default_comparison(latest: date, earliest: date | None = None, days: int = 30) -> ComparisonSpec:
    """
    Last ``days`` days up to ``latest`` against the ``days`` before them.

    Both windows are clipped at ``earliest``; the comparison is dropped when
    clipping leaves no room for it.
    """

    start = latest - timedelta(days=days)
    if earliest is not None and start < earliest:
        start = earliest
    current = DateRange(start=start, end=latest)

    comparison_end = start - timedelta(days=1)
    comparison_start = latest - timedelta(days=days * 2)
    if earliest is not None and comparison_start < earliest:
        comparison_start = earliest
    if comparison_start > comparison_end:
        return ComparisonSpec(current=current)
    return ComparisonSpec(
        current=current,
        comparison=DateRange(start=comparison_start, end=comparison_end),
    )


def _shift_year(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return value.replace(year=value.year + years, day=28)
