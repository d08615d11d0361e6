"""
pulse/mappers/csv_normalizer.py

Parses raw CSV text and maps platform-specific headers onto typed records.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Mapping, Sequence

from pulse.domain.records import UNKNOWN
from pulse.mappers.schemas import FieldKind, FieldSpec, PlatformSchema
from pulse.sources.errors import ParseFailure
from pulse.validators.field_parser import parse_float, parse_int, parse_rate, parse_text

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


def parse_csv_text(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text with a header row into raw rows; blank lines are skipped.

    Raises ``ParseFailure`` when the text is not well-formed CSV.
    """

    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        return []

    try:
        reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
        rows: list[dict[str, str]] = []
        for raw_row in reader:
            if all(value is None or not str(value).strip() for value in raw_row.values()):
                continue
            rows.append({key: value for key, value in raw_row.items() if key is not None})
    except csv.Error as exc:
        raise ParseFailure(f"Invalid CSV format: {exc}") from exc
    return rows


class CSVNormalizer:
    """
    Maps raw rows onto the record type declared by a ``PlatformSchema``.
    """

    def normalize(self, raw_rows: Any, schema: PlatformSchema) -> list[Any]:
        """
        Normalize raw rows into typed records.

        Never raises: a non-list input yields an empty list, non-mapping rows
        are skipped, and unusable cells fall back to field defaults.
        """

        if not isinstance(raw_rows, (list, tuple)) or not raw_rows:
            return []

        records: list[Any] = []
        header_cache: dict[tuple[str, ...], dict[str, str | None]] = {}
        for row_number, raw_row in enumerate(raw_rows, start=2):
            if not isinstance(raw_row, Mapping):
                logger.debug("Skipping non-mapping row file=%s row=%s", schema.file_name, row_number)
                continue

            headers = tuple(key for key in raw_row.keys() if isinstance(key, str))
            resolved = header_cache.get(headers)
            if resolved is None:
                resolved = self._resolve_headers(headers, schema)
                header_cache[headers] = resolved

            values = {
                spec.name: self._coerce(
                    spec, raw_row.get(resolved[spec.name]) if resolved[spec.name] else None
                )
                for spec in schema.fields
            }
            records.append(schema.record_type(**values))
        return records

    @staticmethod
    def _resolve_headers(headers: Sequence[str], schema: PlatformSchema) -> dict[str, str | None]:
        exact = set(headers)
        normalized_lookup: dict[str, str] = {}
        for header in headers:
            normalized = normalize_header(header)
            if normalized and normalized not in normalized_lookup:
                normalized_lookup[normalized] = header

        resolved: dict[str, str | None] = {}
        for spec in schema.fields:
            match: str | None = None
            for candidate in spec.headers:
                if candidate in exact:
                    match = candidate
                    break
            if match is None:
                for candidate in spec.headers:
                    match = normalized_lookup.get(normalize_header(candidate))
                    if match is not None:
                        break
            resolved[spec.name] = match
        return resolved

    @staticmethod
    def _coerce(spec: FieldSpec, value: Any) -> Any:
        if spec.kind is FieldKind.INT:
            return parse_int(value, column=spec.name)
        if spec.kind is FieldKind.FLOAT:
            return parse_float(value, column=spec.name)
        if spec.kind is FieldKind.RATE:
            return parse_rate(value, column=spec.name)
        if spec.kind in (FieldKind.NAME, FieldKind.DATE):
            return parse_text(value, default=UNKNOWN)
        return parse_text(value, default=spec.default if spec.default is not None else "")


def normalize(raw_rows: Any, schema: PlatformSchema) -> list[Any]:
    """
    Module-level shortcut for ``CSVNormalizer().normalize``.
    """

    return CSVNormalizer().normalize(raw_rows, schema)
