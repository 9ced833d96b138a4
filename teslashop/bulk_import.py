"""
Bulk Import - Row validation, preview building and confirmed import

Pipeline for one upload:
1. Read the spreadsheet into a raw grid (file_loader)
2. Map header aliases to columns (column_mapper)
3. Detect the Tesla model once for the whole file, or apply an override
4. Per data row: normalize prices, reconcile the category, compose the
   description and dimensions, validate, apply defaults
5. Aggregate counts into the preview response

The confirmed import (commit_import) writes previewed rows to the catalog store,
resolving categories by exact name and reporting per-row failures.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

import duckdb

from teslashop.category_naming import reconcile_category
from teslashop.column_mapper import ColumnMapper, ColumnMapping
from teslashop.config import DEFAULT_MODEL, IMPORT_DEFAULTS, MODEL_DISPLAY_NAMES
from teslashop.file_loader import grid_rows, load_upload
from teslashop.logger import debug_watcher, get_logger
from teslashop.model_detector import DetectionResult, resolve_model
from teslashop.slugs import slugify
from teslashop.store import CatalogStore, camelize, camelize_keys
from teslashop.value_parser import (
    format_number,
    is_blank,
    parse_count,
    parse_measurement,
    parse_optional_price,
    parse_price,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

UNCATEGORIZED_NAME = "Uncategorized"


@dataclass
class ImportRow:
    """One parsed spreadsheet row, ready to be stored as a product."""

    name: str = ""
    sku: str = ""
    price: float = 0.0
    description: str = ""
    stock_quantity: int = 10
    category: str = ""
    subcategory: str | None = None
    compatible_models: str = DEFAULT_MODEL
    weight: float | None = None
    dimensions: str | None = None
    slug: str = ""
    is_active: bool = True
    track_quantity: bool = True
    low_stock_threshold: int = 5
    oe_number: str | None = None
    unit_packing: str | None = None
    full_packing: str | None = None
    price_10pc: float | None = None
    price_50pc: float | None = None
    price_100pc: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return camelize_keys(asdict(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportRow:
        """
        Build a row from a camelCase (API) or snake_case payload.

        Raises:
            ValueError: name or sku missing.
        """
        values = {}
        for name in cls.__dataclass_fields__:
            camel = camelize(name)
            if camel in data:
                values[name] = data[camel]
            elif name in data:
                values[name] = data[name]
        for name in ("name", "sku"):
            if values.get(name) is not None and not isinstance(values[name], str):
                raise ValueError(f"{'Product name' if name == 'name' else 'SKU'} must be text")
        if not (values.get("name") or "").strip():
            raise ValueError("Product name is required")
        if not (values.get("sku") or "").strip():
            raise ValueError("SKU is required")
        row = cls(**_coerce_payload(values))
        if not row.slug:
            row.slug = slugify(row.name)
        return row


_TEXT_FIELDS = ("name", "sku", "description", "category", "compatible_models", "slug")
_OPTIONAL_TEXT_FIELDS = ("subcategory", "dimensions", "oe_number", "unit_packing", "full_packing")
_TIER_PRICE_FIELDS = ("price_10pc", "price_50pc", "price_100pc")
_FLAG_FIELDS = ("is_active", "track_quantity")


def _coerce_count(raw: Any, label: str, default: int) -> int:
    if is_blank(raw):
        return default
    count = parse_count(raw)
    if count is None or isinstance(raw, bool):
        raise ValueError(f'Invalid {label} "{raw}"')
    return count


def _coerce_payload(values: dict[str, Any]) -> dict[str, Any]:
    """
    Convert JSON payload values to the ImportRow field types.

    Blank numbers fall back to the import defaults, the same way a blank
    spreadsheet cell does.

    Raises:
        ValueError: price or a count is not a number.
    """
    coerced = dict(values)
    for name in _TEXT_FIELDS:
        if name in coerced:
            coerced[name] = cell_text(coerced[name]) or ""
    for name in _OPTIONAL_TEXT_FIELDS:
        if name in coerced:
            coerced[name] = cell_text(coerced[name])
    for name in _FLAG_FIELDS:
        if name in coerced:
            coerced[name] = coerced[name] is not False

    if "price" in coerced:
        raw = coerced["price"]
        parsed = parse_price(raw)
        if not parsed.ok or isinstance(raw, bool):
            raise ValueError(f'Invalid price "{raw}"')
        coerced["price"] = parsed.amount
    for name in _TIER_PRICE_FIELDS:
        if name in coerced:
            coerced[name] = parse_optional_price(coerced[name])
    if "weight" in coerced:
        coerced["weight"] = parse_measurement(coerced["weight"])

    if "stock_quantity" in coerced:
        coerced["stock_quantity"] = _coerce_count(
            coerced["stock_quantity"], "stock quantity", IMPORT_DEFAULTS["stock_quantity"]
        )
    if "low_stock_threshold" in coerced:
        coerced["low_stock_threshold"] = _coerce_count(
            coerced["low_stock_threshold"], "low stock threshold", IMPORT_DEFAULTS["low_stock_threshold"]
        )
    return coerced


@dataclass
class PreviewRow:
    row: ImportRow
    row_number: int
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        payload = self.row.to_dict()
        payload.update({
            "hasErrors": self.has_errors,
            "errors": list(self.errors),
            "rowNumber": self.row_number,
        })
        return payload


@dataclass
class ImportPreview:
    filename: str
    detection: DetectionResult
    mapping: ColumnMapping
    rows: list[PreviewRow] = field(default_factory=list)
    total_rows: int = 0
    price_successes: int = 0
    price_errors: int = 0

    @property
    def valid_rows(self) -> int:
        return sum(1 for r in self.rows if not r.has_errors)

    @property
    def error_rows(self) -> int:
        return sum(1 for r in self.rows if r.has_errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "data": [r.row.to_dict() for r in self.rows],
            "preview": [r.to_dict() for r in self.rows],
            "detectedModel": self.detection.model,
            "detection": self.detection.to_dict(),
            "columnMapping": self.mapping.to_dict(),
            "filename": self.filename,
            "totalRows": self.total_rows,
            "validRows": self.valid_rows,
            "errorRows": self.error_rows,
            "priceParsingStats": {
                "successes": self.price_successes,
                "errors": self.price_errors,
            },
        }


def cell_text(value: Any) -> str | None:
    """Trimmed text of a cell; workbook floats like 1234.0 render as "1234"."""
    if is_blank(value):
        return None
    if isinstance(value, float):
        return format_number(value)
    return str(value).strip()


def clean_name(value: Any) -> str:
    text = cell_text(value)
    return _WHITESPACE.sub(" ", text).strip() if text else ""


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(is_blank(cell) for cell in row)


def compose_dimensions(mapping: ColumnMapping, row: Sequence[Any]) -> str | None:
    """Dimensions column, else raw_dimensions, else "L*W*H" from the components."""
    for field_name in ("dimensions", "raw_dimensions"):
        text = cell_text(mapping.value(row, field_name))
        if text:
            return text

    parts = [parse_measurement(mapping.value(row, f)) for f in ("length", "width", "height")]
    if all(p is not None for p in parts):
        return "*".join(format_number(p) for p in parts)
    return None


def build_description(row: ImportRow) -> str:
    parts = []
    if row.oe_number:
        parts.append(f"OE: {row.oe_number}")
    if row.weight is not None:
        parts.append(f"Weight: {format_number(row.weight)}")
    if row.dimensions:
        parts.append(f"Dimensions: {row.dimensions}")
    if row.unit_packing:
        parts.append(f"Unit Packing: {row.unit_packing}")
    if row.full_packing:
        parts.append(f"Full Packing: {row.full_packing}")
    if row.price_10pc is not None:
        tiers = [
            f"{label}: {format_number(value) if value is not None else '-'}"
            for label, value in (("10pc", row.price_10pc), ("50pc", row.price_50pc), ("100pc", row.price_100pc))
        ]
        parts.append("Bulk Pricing - " + ", ".join(tiers))
    return " | ".join(parts)


def validate_row(row: ImportRow, raw_price: Any = None, price_ok: bool = True) -> list[str]:
    """
    Row-level validation. Returns error messages in a stable order.

    Args:
        row: Normalized row.
        raw_price: Original price cell, quoted in the error when unparseable.
        price_ok: Whether the price normalizer accepted the cell.
    """
    errors = []
    if len(row.name) < IMPORT_DEFAULTS["min_name_length"]:
        errors.append(
            f"Product name is required and must be at least {IMPORT_DEFAULTS['min_name_length']} characters"
        )
    if len(row.sku) < IMPORT_DEFAULTS["min_sku_length"]:
        errors.append(f"SKU is required and must be at least {IMPORT_DEFAULTS['min_sku_length']} characters")
    if not price_ok:
        errors.append(f'Invalid price "{str(raw_price).strip()}" (price_1pc column)')
    elif row.price < 0:
        errors.append(f"Price cannot be negative (got {format_number(row.price)})")
    return errors


def build_row(mapping: ColumnMapping, raw: Sequence[Any], model: str) -> tuple[ImportRow, Any, bool]:
    """
    Turn one raw grid row into an ImportRow.

    Returns:
        (row, raw price cell, price parse ok)
    """
    raw_price = mapping.value(raw, "price")
    price = parse_price(raw_price)

    stock = parse_count(mapping.value(raw, "stock_quantity"))
    row = ImportRow(
        name=clean_name(mapping.value(raw, "name")),
        sku=cell_text(mapping.value(raw, "sku")) or "",
        price=price.amount,
        stock_quantity=stock if stock and stock > 0 else IMPORT_DEFAULTS["stock_quantity"],
        category=reconcile_category(
            cell_text(mapping.value(raw, "category")),
            cell_text(mapping.value(raw, "subcategory")),
            model,
        ),
        subcategory=cell_text(mapping.value(raw, "subcategory")),
        compatible_models=model,
        weight=parse_measurement(mapping.value(raw, "weight")),
        dimensions=compose_dimensions(mapping, raw),
        is_active=IMPORT_DEFAULTS["is_active"],
        track_quantity=IMPORT_DEFAULTS["track_quantity"],
        low_stock_threshold=IMPORT_DEFAULTS["low_stock_threshold"],
        oe_number=cell_text(mapping.value(raw, "oe_number")),
        unit_packing=cell_text(mapping.value(raw, "unit_packing")),
        full_packing=cell_text(mapping.value(raw, "full_packing")),
        price_10pc=parse_optional_price(mapping.value(raw, "price_10pc")),
        price_50pc=parse_optional_price(mapping.value(raw, "price_50pc")),
        price_100pc=parse_optional_price(mapping.value(raw, "price_100pc")),
    )
    row.description = build_description(row)
    row.slug = slugify(row.name)
    return row, raw_price, price.ok


def preview_grid(
    rows: list[list[Any]],
    filename: str,
    model_override: str | None = None,
    mapper: ColumnMapper | None = None,
) -> ImportPreview:
    """
    Build the preview from an already decoded grid (row 0 is the header).

    Raises:
        ValueError: Invalid model override token.
    """
    detection = resolve_model(filename, rows, model_override)
    mapping = (mapper or ColumnMapper()).map_headers(rows[0] if rows else [])
    if mapping.unmapped_fields:
        logger.debug(f"Unmapped import fields for {filename}: {', '.join(mapping.unmapped_fields)}")

    preview = ImportPreview(filename=filename, detection=detection, mapping=mapping)
    data_rows = rows[1:]
    preview.total_rows = len(data_rows)

    for index, raw in enumerate(data_rows):
        if is_blank_row(raw):
            continue
        row, raw_price, price_ok = build_row(mapping, raw, detection.model)
        if price_ok:
            preview.price_successes += 1
        else:
            preview.price_errors += 1
        preview.rows.append(PreviewRow(row=row, row_number=index + 2, errors=validate_row(row, raw_price, price_ok)))

    logger.info(
        f"Preview of {filename}: {len(preview.rows)} rows ({preview.valid_rows} valid, "
        f"{preview.error_rows} with errors), model {detection.model} via {detection.source}"
    )
    return preview


@debug_watcher
def build_preview(content: bytes, filename: str, model_override: str | None = None) -> ImportPreview:
    """
    Read an upload and build its import preview.

    Raises:
        UnsupportedFileError, EmptyFileError: From the spreadsheet reader.
        ValueError: Invalid model override token.
    """
    grid = load_upload(content, filename)
    return preview_grid(grid_rows(grid), filename, model_override)


@dataclass
class ImportSummary:
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    categories_created: list[str] = field(default_factory=list)

    def add_error(self, row_number: int, sku: str | None, message: str) -> None:
        self.failed += 1
        self.errors.append({"row": row_number, "sku": sku, "message": message})

    @property
    def message(self) -> str:
        return (
            f"Successfully imported {self.successful} products. "
            f"Created {len(self.categories_created)} new categories."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
            "categoriesCreated": list(self.categories_created),
            "message": self.message,
        }


def _resolve_category_id(store: CatalogStore, row: ImportRow, summary: ImportSummary) -> str:
    category = store.find_category_by_name(row.category)
    if category is not None:
        return category["id"]

    logger.debug(f"Category not found: {row.category}")
    root_name = MODEL_DISPLAY_NAMES.get(row.compatible_models, MODEL_DISPLAY_NAMES[DEFAULT_MODEL])
    root = store.find_category_by_name(root_name)
    if root is not None:
        return root["id"]

    category_id, created = store.insert_category(
        UNCATEGORIZED_NAME,
        description="Products without specific categories",
        level=1,
        sort_order=IMPORT_DEFAULTS["uncategorized_sort_order"],
    )
    if created:
        summary.categories_created.append(UNCATEGORIZED_NAME)
    return category_id


def product_record(row: ImportRow, category_id: str) -> dict[str, Any]:
    description = row.description or None
    return {
        "name": row.name,
        "sku": row.sku,
        "slug": row.slug or slugify(row.name),
        "description": description,
        "short_description": row.name[: IMPORT_DEFAULTS["short_description_length"]],
        "price": float(row.price),
        "stock_quantity": int(row.stock_quantity),
        "low_stock_threshold": int(row.low_stock_threshold or IMPORT_DEFAULTS["low_stock_threshold"]),
        "track_quantity": row.track_quantity is not False,
        "compatible_models": row.compatible_models or DEFAULT_MODEL,
        "weight": row.weight,
        "dimensions": row.dimensions or None,
        "category_id": category_id,
        "is_active": row.is_active is not False,
        "is_featured": False,
        "meta_title": row.name,
        "meta_description": description[: IMPORT_DEFAULTS["meta_description_length"]] if description else None,
    }


@debug_watcher
def commit_import(store: CatalogStore, rows: Iterable[ImportRow | dict[str, Any]]) -> ImportSummary:
    """
    Store previewed rows as products. Failures are reported per row
    (row number = index + 2) and never abort the batch.
    """
    summary = ImportSummary()
    for index, item in enumerate(rows):
        summary.total += 1
        row_number = index + 2
        sku = item.get("sku") if isinstance(item, dict) else item.sku

        try:
            row = item if isinstance(item, ImportRow) else ImportRow.from_dict(item)
        except (TypeError, ValueError) as e:
            summary.add_error(row_number, sku, str(e))
            continue

        try:
            category_id = _resolve_category_id(store, row, summary)
            if store.get_product_by_sku(row.sku) is not None:
                summary.add_error(row_number, row.sku, f'Product with SKU "{row.sku}" already exists')
                continue
            store.insert_product(product_record(row, category_id))
        except (TypeError, ValueError, duckdb.Error) as e:
            logger.error(f"Error creating product {row.sku}: {e}")
            summary.add_error(row_number, row.sku, str(e))
            continue

        summary.successful += 1

    logger.info(summary.message)
    return summary
