"""
metrics/base.py

Abstract base class for all platform metric formulas.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


def safe_rate(numerator: float, denominator: float) -> float:
    """
    Rate = numerator / denominator * 100.

    Returns 0.0 when denominator is zero.
    """
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100.0


class BaseMetricFormula(ABC):
    """
    Contract for platform metric formulas.

    Subclasses receive a mapping of already-normalized, already-filtered
    record lists keyed by role and return a JSON-ready dictionary of totals,
    rates, and groupings.

    No I/O, no logging, and no side effects are permitted inside
    :meth:`calculate`.
    """

    @abstractmethod
    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        """
        Compute platform metrics from *inputs* and return a result dictionary.

        Parameters
        ----------
        inputs:
            Record lists keyed by role, as listed in the formula module docstring.

        Returns
        -------
        dict[str, Any]
            Computed metrics keyed by metric name.
        """
