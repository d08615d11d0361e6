"""
pulse/validators package marker.
"""

from pulse.validators.field_parser import parse_date, parse_float, parse_int, parse_rate, parse_text

__all__ = [
    "parse_date",
    "parse_float",
    "parse_int",
    "parse_rate",
    "parse_text",
]
