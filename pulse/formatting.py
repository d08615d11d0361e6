"""
pulse/formatting.py

Display formatting for dashboard KPI cards.

Pure helpers consumed by presentation payloads; aggregation never formats.
"""

from __future__ import annotations

import math
from typing import Any

from metrics.ranking import percent_change, point_change

MISSING = "--"


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def format_number(value: Any, kind: str = "number") -> str:
    """
    Format a metric value for display.

    ``number`` uses K/M suffixes above a thousand, ``percent`` keeps one
    decimal, ``duration`` renders seconds as ``m:ss``.
    """
    if not _is_number(value):
        return MISSING

    if kind == "percent":
        return f"{value:.1f}%"
    if kind == "duration":
        total_seconds = max(0, int(value))
        return f"{total_seconds // 60}:{total_seconds % 60:02d}"

    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:.0f}"


def format_change(current: float, prior: float, *, rate: bool = False) -> str:
    """
    Arrow-prefixed change: percent change for counts, points for rates.

    A zero prior yields a flat ``0.0%``.
    """
    change = point_change(current, prior) if rate else percent_change(current, prior)
    arrow = "↑" if change >= 0 else "↓"
    unit = " pts" if rate else "%"
    return f"{arrow} {abs(change):.1f}{unit}"


def kpi_card(title: str, current: Any, prior: Any = None, kind: str = "number") -> dict[str, Any]:
    """
    One KPI card payload; ``change`` is present only when a prior value is known.
    """
    card: dict[str, Any] = {
        "title": title,
        "value": current,
        "display": format_number(current, kind),
        "kind": kind,
    }
    if _is_number(current) and _is_number(prior):
        rate = kind == "percent"
        card["prior"] = prior
        card["prior_display"] = format_number(prior, kind)
        card["change"] = point_change(current, prior) if rate else percent_change(current, prior)
        card["change_display"] = format_change(current, prior, rate=rate)
    return card
