"""
Import Template - Downloadable CSV/XLSX starter files for bulk import

The XLSX template carries the sample rows on its first sheet (the sheet the
importer reads) and a "Columns" sheet describing each header.
"""

from __future__ import annotations

import csv
from io import BytesIO, StringIO
from pathlib import Path

import xlsxwriter

TEMPLATE_HEADERS = [
    "title", "sku", "oe_number", "price_1pc", "price_10pc", "price_50pc", "price_100pc",
    "main_category", "subcategory", "weight", "dimensions", "unit_packing", "full_packing",
]

TEMPLATE_ROWS = [
    [
        "MODEL 3 Front Bumper (With Sensor Hole)", "BN-TE-3-0004", "1084168-SO-5-E",
        "44", "41", "39", "37", "Model 3 - BODY", "M3 1001 - Bumper and Fascia",
        "5.2", "185*58*45", "1 pc/box", "4 pcs/carton",
    ],
    [
        "MODEL 3 Door Handle Left", "DH-TE-3-0001", "1077730-00-C",
        "29.99", "", "", "", "Model 3 - CLOSURE COMPONENTS", "M3 1145 - Exterior Door Handles",
        "0.5", "15*8*3", "1 pc/bag", "",
    ],
]

COLUMN_NOTES = [
    ("title", "Product name (required, at least 3 characters)"),
    ("sku", "Product SKU (required, at least 3 characters, unique)"),
    ("oe_number", "OE part number"),
    ("price_1pc", "Price per piece (CAD); $, commas and CAD are accepted"),
    ("price_10pc / price_50pc / price_100pc", "Bulk tier prices"),
    ("main_category", "Main category, e.g. Model 3 - BODY"),
    ("subcategory", "Subcategory, e.g. M3 1001 - Bumper and Fascia (preferred over main_category)"),
    ("weight", "Weight in kg"),
    ("dimensions", "Dimensions (L*W*H); or use length, width and height columns"),
    ("unit_packing / full_packing", "Packing info"),
    ("stock", "Units in stock (defaults to 10)"),
]

TEMPLATE_FILENAMES = {
    "csv": "tesla-import-template.csv",
    "xlsx": "tesla-import-template.xlsx",
}


def template_csv() -> bytes:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue().encode("utf-8")


def template_xlsx() -> bytes:
    """Build the XLSX template in memory."""
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})

    header_format = workbook.add_format({
        "bold": True,
        "bg_color": "#4472C4",
        "font_color": "#FFFFFF",
        "border": 1,
        "align": "center",
        "valign": "vcenter",
    })
    cell_format = workbook.add_format({"border": 1})

    ws = workbook.add_worksheet("Products")
    for col_idx, header in enumerate(TEMPLATE_HEADERS):
        ws.write(0, col_idx, header, header_format)
        width = max([len(header)] + [len(str(row[col_idx])) for row in TEMPLATE_ROWS])
        ws.set_column(col_idx, col_idx, min(width + 2, 45))
    for row_idx, row in enumerate(TEMPLATE_ROWS, start=1):
        for col_idx, value in enumerate(row):
            ws.write_string(row_idx, col_idx, value, cell_format)
    ws.freeze_panes(1, 0)

    notes = workbook.add_worksheet("Columns")
    notes.write(0, 0, "Column", header_format)
    notes.write(0, 1, "Meaning", header_format)
    for row_idx, (column, meaning) in enumerate(COLUMN_NOTES, start=1):
        notes.write(row_idx, 0, column, cell_format)
        notes.write(row_idx, 1, meaning, cell_format)
    notes.set_column(0, 0, 38)
    notes.set_column(1, 1, 80)

    workbook.close()
    return output.getvalue()


def render_template(fmt: str = "xlsx") -> tuple[bytes, str, str]:
    """
    Returns:
        (content, filename, media type)

    Raises:
        ValueError: Unknown format.
    """
    fmt = (fmt or "xlsx").lower()
    if fmt == "csv":
        return template_csv(), TEMPLATE_FILENAMES["csv"], "text/csv"
    if fmt == "xlsx":
        return (
            template_xlsx(),
            TEMPLATE_FILENAMES["xlsx"],
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    raise ValueError(f"Unsupported template format: {fmt}")


def write_template(path: str | Path) -> Path:
    """Write the template to ``path``; the suffix (.csv/.xlsx) picks the format."""
    path = Path(path)
    content, _, _ = render_template(path.suffix.lstrip(".") or "xlsx")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
