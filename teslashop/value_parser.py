"""
Numeric parsing utilities for spreadsheet price and measurement cells.

Prices tolerate "$", thousands separators, whitespace and a leading or trailing
"CAD" token (e.g. "$1,234.56 CAD" -> 1234.56). Blank cells are a successful
parse of 0; anything else that does not parse is reported as a failure.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

import pandas as pd

_CAD_TOKEN = re.compile(r"^cad|cad$", re.IGNORECASE)
_PRICE_NOISE = re.compile(r"[$,\s]")
_LEADING_NUMBER = re.compile(r"^[-+]?\d*\.?\d+")


@dataclass(frozen=True)
class PriceParse:
    """Result of normalizing one price cell."""

    amount: float
    ok: bool


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _strip_price_text(text: str) -> str:
    cleaned = _PRICE_NOISE.sub("", text)
    cleaned = _CAD_TOKEN.sub("", cleaned)
    return cleaned


def parse_price(value: Any) -> PriceParse:
    """
    Normalize a raw price cell.

    Negative amounts are returned as parsed; rejecting them is the caller's job.

    Returns:
        PriceParse(amount, ok). Blank input gives (0.0, True); unparseable
        input gives (0.0, False).
    """
    if is_blank(value):
        return PriceParse(0.0, True)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        numeric = float(value)
        return PriceParse(numeric, True) if math.isfinite(numeric) else PriceParse(0.0, False)

    cleaned = _strip_price_text(str(value).strip())
    if not cleaned:
        return PriceParse(0.0, False)

    try:
        numeric = float(cleaned)
    except ValueError:
        return PriceParse(0.0, False)

    if not math.isfinite(numeric):
        return PriceParse(0.0, False)
    return PriceParse(numeric, True)


def parse_optional_price(value: Any) -> float | None:
    """Tier prices: None when blank or unparseable."""
    if is_blank(value):
        return None
    parsed = parse_price(value)
    return parsed.amount if parsed.ok else None


def parse_measurement(value: Any) -> float | None:
    """
    Parse a weight or dimension component, ignoring trailing units.

    Examples:
        "5.2" -> 5.2, "5.2kg" -> 5.2, "" -> None, "n/a" -> None
    """
    if is_blank(value):
        return None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        numeric = float(value)
        return numeric if math.isfinite(numeric) else None

    text = str(value).strip().replace(",", ".")
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(0))


def parse_count(value: Any) -> int | None:
    """Parse a stock count; fractional values are truncated."""
    numeric = parse_measurement(value)
    if numeric is None:
        return None
    return int(numeric)


def format_number(value: float) -> str:
    """Render 44.0 as "44" and 29.99 as "29.99" for human-readable text."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
