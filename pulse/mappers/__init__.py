"""
pulse/mappers package marker.
"""

from pulse.mappers.csv_normalizer import CSVNormalizer, normalize, normalize_header, parse_csv_text
from pulse.mappers.schemas import SCHEMAS, FieldKind, FieldSpec, PlatformSchema, get_schema

__all__ = [
    "SCHEMAS",
    "CSVNormalizer",
    "FieldKind",
    "FieldSpec",
    "PlatformSchema",
    "get_schema",
    "normalize",
    "normalize_header",
    "parse_csv_text",
]
