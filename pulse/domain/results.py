"""
pulse/domain/results.py

Structured outcomes surfaced to configuration diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceCheckResult:
    """
    User-facing verdict for one source or one dashboard configuration.
    """

    valid: bool
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"valid": self.valid, "message": self.message}
