"""
Column Mapper - Header-to-Field Resolution

Maps the import fields (title, sku, oe_number, price tiers, category,
subcategory, weight, dimensions, packing, stock) to column indices of an
uploaded sheet by case-insensitive header aliases.

Matching runs in two passes:
1. Exact: a header equal to one of the field's aliases (confidence HIGH).
2. Partial: a header containing one of the aliases (confidence MEDIUM).

A header column is claimed by at most one field, so "subcategory" is never
taken by the "category" field when a "main_category" column exists.

Example headers:
- "title"        -> name (HIGH)
- "Price_1pc"    -> price (HIGH)
- "Product Name" -> name (MEDIUM, contains "name")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from teslashop.config import COLUMN_ALIASES

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass
class FieldMatch:
    """Where one import field was found in the header row."""

    field_name: str
    column_index: int
    header: str
    alias: str
    confidence: str  # "HIGH" (exact) or "MEDIUM" (partial)


@dataclass
class ColumnMapping:
    """Result of mapping a header row."""

    headers: list[str]
    fields: list[str] = field(default_factory=lambda: list(COLUMN_ALIASES))
    matches: dict[str, FieldMatch] = field(default_factory=dict)

    def index_of(self, field_name: str) -> int | None:
        match = self.matches.get(field_name)
        return match.column_index if match else None

    def value(self, row: Sequence[Any], field_name: str) -> Any:
        """Return the raw cell for a field, or None if unmapped or out of range."""
        index = self.index_of(field_name)
        if index is None or index >= len(row):
            return None
        return row[index]

    @property
    def unmapped_fields(self) -> list[str]:
        return [name for name in self.fields if name not in self.matches]

    def to_dict(self) -> dict[str, Any]:
        return {
            name: {
                "column": m.column_index,
                "header": m.header,
                "confidence": m.confidence,
            }
            for name, m in self.matches.items()
        }


def normalize_header(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


class ColumnMapper:
    """Resolves import fields to column indices from a header row."""

    def __init__(self, aliases: dict[str, list[str]] | None = None):
        """
        Args:
            aliases: Optional field-to-aliases mapping. Defaults to COLUMN_ALIASES.
        """
        self.aliases = aliases or COLUMN_ALIASES

    def map_headers(self, header_row: Sequence[Any]) -> ColumnMapping:
        headers = [normalize_header(h) for h in header_row]
        mapping = ColumnMapping(headers=headers, fields=list(self.aliases))
        claimed: set[int] = set()

        # Pass 1: exact header matches
        for field_name, aliases in self.aliases.items():
            for alias in aliases:
                index = self._find(headers, claimed, lambda h, a=alias: h == a)
                if index is not None:
                    mapping.matches[field_name] = FieldMatch(
                        field_name, index, headers[index], alias, "HIGH"
                    )
                    claimed.add(index)
                    break

        # Pass 2: headers containing an alias
        for field_name, aliases in self.aliases.items():
            if field_name in mapping.matches:
                continue
            for alias in aliases:
                index = self._find(headers, claimed, lambda h, a=alias: a in h)
                if index is not None:
                    mapping.matches[field_name] = FieldMatch(
                        field_name, index, headers[index], alias, "MEDIUM"
                    )
                    claimed.add(index)
                    break

        return mapping

    @staticmethod
    def _find(headers: list[str], claimed: set[int], predicate) -> int | None:
        for index, header in enumerate(headers):
            if index in claimed or not header:
                continue
            if predicate(header):
                return index
        return None
