"""
pulse/domain package marker.
"""

from pulse.domain.date_range import ComparisonSpec, DateRange, default_comparison
from pulse.domain.results import SourceCheckResult

__all__ = [
    "ComparisonSpec",
    "DateRange",
    "SourceCheckResult",
    "default_comparison",
]
