"""
metrics/ranking.py

Top-N ranking and period-over-period comparison helpers.

Items may be mappings or objects exposing the metric as an attribute.
All functions are pure.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_TOP_N = 5


def _value(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def _number(item: Any, field: str) -> float:
    value = _value(item, field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def top_n(items: Iterable[T], metric: str, n: int = DEFAULT_TOP_N) -> list[T]:
    """
    Return at most *n* items sorted descending by *metric*.

    Ties keep their input order; a missing or non-numeric metric ranks as 0.
    """
    if n <= 0:
        return []
    # sorted() stays stable with reverse=True
    return sorted(items, key=lambda item: _number(item, metric), reverse=True)[:n]


def percent_change(current: float, prior: float) -> float:
    """
    Percent Change = (current - prior) / prior * 100.

    Returns 0.0 when prior is zero.
    """
    if prior == 0:
        return 0.0
    return (current - prior) / prior * 100.0


def point_change(current: float, prior: float) -> float:
    """
    Percentage-point difference between two rates.
    """
    return current - prior


def _change_entry(current: float, prior: float, *, rate: bool) -> dict[str, float]:
    return {
        "current": current,
        "prior": prior,
        "change": point_change(current, prior) if rate else percent_change(current, prior),
    }


def compare_totals(
    current: Mapping[str, float],
    prior: Mapping[str, float],
    *,
    rate_fields: Iterable[str] = (),
) -> dict[str, dict[str, float]]:
    """
    Compare two flat metric dictionaries key by key.

    Keys absent from *prior* compare against zero. Keys named in
    *rate_fields* report a point change instead of a percent change.
    """
    rates = set(rate_fields)
    result: dict[str, dict[str, float]] = {}
    for name, value in current.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        prior_value = prior.get(name, 0)
        if isinstance(prior_value, bool) or not isinstance(prior_value, (int, float)):
            prior_value = 0
        result[name] = _change_entry(float(value), float(prior_value), rate=name in rates)
    return result


def _group_by_key(items: Iterable[Any], key: str, metrics: Sequence[str]) -> dict[str, dict[str, float]]:
    grouped: dict[str, dict[str, float]] = {}
    for item in items:
        identity = str(_value(item, key))
        bucket = grouped.setdefault(identity, {metric: 0.0 for metric in metrics})
        for metric in metrics:
            bucket[metric] += _number(item, metric)
    return grouped


def compare_entities(
    current: Iterable[Any],
    prior: Iterable[Any],
    key: str,
    metrics: Sequence[str],
) -> list[dict[str, Any]]:
    """
    Pair entities of two periods by *key* and compare each metric.

    Entities present in only one period compare against a zero baseline.
    Rows sharing a key within a period are summed. Output keeps the order of
    first appearance, current period first.
    """
    current_groups = _group_by_key(current, key, metrics)
    prior_groups = _group_by_key(prior, key, metrics)
    zero = {metric: 0.0 for metric in metrics}

    identities = list(current_groups)
    identities.extend(identity for identity in prior_groups if identity not in current_groups)

    comparisons: list[dict[str, Any]] = []
    for identity in identities:
        now = current_groups.get(identity, zero)
        before = prior_groups.get(identity, zero)
        comparisons.append(
            {
                key: identity,
                "in_current": identity in current_groups,
                "in_prior": identity in prior_groups,
                "metrics": {
                    metric: _change_entry(now[metric], before[metric], rate=False)
                    for metric in metrics
                },
            }
        )
    return comparisons
