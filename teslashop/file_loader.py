"""
Spreadsheet reader for product uploads.

Decodes uploaded CSV/XLSX/XLS bytes into a raw grid (row 0 is the header row).
CSV cells are kept as text; workbook cells keep their native types.
"""

from __future__ import annotations

import csv
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any

import pandas as pd

from teslashop.config import ALLOWED_SUFFIXES, CSV_DELIMITERS, CSV_ENCODINGS
from teslashop.logger import get_logger

logger = get_logger(__name__)


class UnsupportedFileError(ValueError):
    """Raised when an upload has an extension outside ALLOWED_SUFFIXES."""


class EmptyFileError(ValueError):
    """Raised when an upload decodes to zero rows."""


def file_suffix(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def is_supported(filename: str) -> bool:
    return file_suffix(filename) in ALLOWED_SUFFIXES


def sniff_csv_delimiter(sample: str) -> str | None:
    """
    Pick the delimiter of a header line. A comma anywhere in the header wins;
    the sniffer only runs for headers without one.
    """
    if not sample:
        return None
    if "," in sample:
        return ","
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters="".join(CSV_DELIMITERS))
        return dialect.delimiter
    except csv.Error:
        return None


def load_csv(
    content: bytes,
    *,
    delimiter: str | None = None,
    encoding: str | None = None,
) -> pd.DataFrame:
    encodings_to_try = [encoding] if encoding else CSV_ENCODINGS
    last_error: Exception | None = None
    for candidate in encodings_to_try:
        try:
            text = content.decode(candidate)
        except UnicodeDecodeError as exc:
            last_error = exc
            continue
        if not text.strip():
            raise EmptyFileError("File is empty")
        # Only the header line feeds the sniffer; data rows with commas inside
        # prices would otherwise confuse it.
        sep = delimiter or sniff_csv_delimiter(text.splitlines()[0]) or ","
        # Ragged rows are padded with None; blank lines stay as empty rows so
        # row numbers match the file.
        rows = list(csv.reader(StringIO(text), delimiter=sep))
        return pd.DataFrame(rows, dtype=object)
    raise ValueError("Failed to load CSV upload") from last_error


def load_excel(content: bytes, *, suffix: str = ".xlsx", sheet_name: str | int = 0) -> pd.DataFrame:
    engine = "openpyxl" if suffix == ".xlsx" else None
    return pd.read_excel(BytesIO(content), engine=engine, sheet_name=sheet_name, header=None)


def load_upload(content: bytes, filename: str) -> pd.DataFrame:
    """
    Decode an uploaded spreadsheet into a raw grid.

    Args:
        content: Raw file bytes.
        filename: Original filename; its extension selects the decoder.

    Returns:
        DataFrame with integer column labels and no header inference.
        Missing cells are None.

    Raises:
        UnsupportedFileError: Extension is not .csv/.xlsx/.xls.
        EmptyFileError: The file holds no rows.
    """
    suffix = file_suffix(filename)
    if suffix not in ALLOWED_SUFFIXES:
        raise UnsupportedFileError(f"Unsupported file format: {suffix or 'unknown'}")
    if not content:
        raise EmptyFileError("File is empty")

    if suffix == ".csv":
        grid = load_csv(content)
    else:
        grid = load_excel(content, suffix=suffix)

    if grid.empty:
        raise EmptyFileError("File is empty")

    grid = grid.astype(object)
    grid = grid.where(grid.notna(), None)
    grid.columns = range(grid.shape[1])
    grid = grid.reset_index(drop=True)
    logger.debug(f"Loaded {filename}: {grid.shape[0]} rows x {grid.shape[1]} columns")
    return grid


def grid_rows(grid: pd.DataFrame) -> list[list[Any]]:
    """Return the grid as a list of row lists (header row first)."""
    return grid.values.tolist()
