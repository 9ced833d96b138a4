"""
Configuration Module - Centralized Configuration Hub

Contains all configurable parameters for the catalog back office:
- Directory and database paths
- Accepted upload formats
- Import defaults and validation limits
- Spreadsheet header aliases for the column mapper
- Storefront search settings
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any


# ============================================================================
# DIRECTORY PATHS
# ============================================================================

# Project root directory (parent of teslashop/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Data/persistence directories
DATA_PATH = PROJECT_ROOT / "data"
CATALOG_DB_PATH = DATA_PATH / "catalog.duckdb"

# Configuration file directory
CONFIG_DIR = PROJECT_ROOT / "config"


# ============================================================================
# UPLOADS
# ============================================================================

ALLOWED_SUFFIXES = (".csv", ".xlsx", ".xls")
CSV_ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]
CSV_DELIMITERS = [",", ";", "\t", "|"]


# ============================================================================
# TESLA MODELS
# ============================================================================

MODEL_3 = "MODEL_3"
MODEL_Y = "MODEL_Y"
MODEL_S = "MODEL_S"
MODEL_X = "MODEL_X"

# Detection priority and tie-break order
MODEL_PRIORITY = (MODEL_3, MODEL_Y, MODEL_S, MODEL_X)
DEFAULT_MODEL = MODEL_3

MODEL_DISPLAY_NAMES = {
    MODEL_3: "Model 3",
    MODEL_Y: "Model Y",
    MODEL_S: "Model S",
    MODEL_X: "Model X",
}


# ============================================================================
# IMPORT DEFAULTS AND VALIDATION
# ============================================================================
# Note: defaults are loaded from JSON files if available (see bottom of file)

_IMPORT_DEFAULTS_DEFAULT: dict[str, Any] = {
    "stock_quantity": 10,
    "low_stock_threshold": 5,
    "is_active": True,
    "track_quantity": True,
    "min_name_length": 3,
    "min_sku_length": 3,
    "uncategorized_sort_order": 999,
    "short_description_length": 100,
    "meta_description_length": 160,
}


# ============================================================================
# COLUMN ALIASES
# ============================================================================
# Maps import fields to lower-case header aliases, in preference order.
# Note: aliases are loaded from JSON files if available (see bottom of file)

_COLUMN_ALIASES_DEFAULT: dict[str, list[str]] = {
    "name": ["title", "name", "product_name"],
    "sku": ["sku", "part_number"],
    "oe_number": ["oe_number", "oem_number"],
    "unit_packing": ["unit_packing"],
    "full_packing": ["full_packing"],
    "price": ["price_1pc", "price"],
    "price_10pc": ["price_10pc"],
    "price_50pc": ["price_50pc"],
    "price_100pc": ["price_100pc"],
    "category": ["main_category", "category"],
    "subcategory": ["subcategory", "sub_category"],
    "weight": ["weight"],
    "dimensions": ["dimensions"],
    "raw_dimensions": ["raw_dimensions"],
    "height": ["height"],
    "width": ["width"],
    "length": ["length"],
    "stock_quantity": ["stock", "quantity", "inventory"],
}


# ============================================================================
# STOREFRONT SEARCH
# ============================================================================

SEARCH_SETTINGS = {
    "max_results": 50,
    "default_sort": "relevance",
    "sort_options": ("relevance", "price-low", "price-high", "newest", "name"),
}


# ============================================================================
# CONFIG LOADING AND VALIDATION
# ============================================================================

def _load_import_defaults_from_json(defaults: dict[str, Any]) -> dict[str, Any]:
    """Load import defaults from JSON file, merge with defaults."""
    defaults_file = CONFIG_DIR / "import_defaults.json"
    if defaults_file.exists():
        try:
            with open(defaults_file, "r") as f:
                data = json.load(f)
                if "defaults" in data:
                    merged = defaults.copy()
                    merged.update(data["defaults"])
                    return merged
        except Exception as e:
            warnings.warn(f"Failed to load import defaults from JSON: {e}. Using defaults.")
    return defaults


def _load_column_aliases_from_json(defaults: dict[str, list[str]]) -> dict[str, list[str]]:
    """Load column aliases from JSON file, merge with defaults."""
    aliases_file = CONFIG_DIR / "column_aliases.json"
    if aliases_file.exists():
        try:
            with open(aliases_file, "r") as f:
                data = json.load(f)
                if "aliases" in data:
                    merged = {field: list(names) for field, names in defaults.items()}
                    for field, names in data["aliases"].items():
                        if isinstance(names, list):
                            merged[field] = [str(n).lower().strip() for n in names]
                    return merged
        except Exception as e:
            warnings.warn(f"Failed to load column aliases from JSON: {e}. Using defaults.")
    return defaults


# Load from JSON if available, otherwise use defaults
IMPORT_DEFAULTS = _load_import_defaults_from_json(_IMPORT_DEFAULTS_DEFAULT)
COLUMN_ALIASES = _load_column_aliases_from_json(_COLUMN_ALIASES_DEFAULT)


def load_config() -> dict[str, Any]:
    """
    Load and return all configuration as a dictionary.

    Returns:
        Dictionary with all configuration values.
    """
    return {
        "project_root": PROJECT_ROOT,
        "data_path": DATA_PATH,
        "catalog_db_path": CATALOG_DB_PATH,
        "config_dir": CONFIG_DIR,
        "allowed_suffixes": ALLOWED_SUFFIXES,
        "model_priority": MODEL_PRIORITY,
        "import_defaults": IMPORT_DEFAULTS,
        "column_aliases": COLUMN_ALIASES,
        "search_settings": SEARCH_SETTINGS,
    }


def validate_config() -> tuple[bool, list[str]]:
    """
    Validate configuration settings.

    Returns:
        Tuple of (is_valid, list_of_errors).
    """
    errors = []

    for key in ("stock_quantity", "low_stock_threshold", "min_name_length", "min_sku_length"):
        value = IMPORT_DEFAULTS.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            errors.append(f"Invalid import default for {key}: {value}")

    for required in ("name", "sku", "price"):
        if not COLUMN_ALIASES.get(required):
            errors.append(f"No header aliases configured for required field '{required}'")

    seen: dict[str, str] = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in seen and seen[alias] != field:
                errors.append(f"Alias '{alias}' used by both '{seen[alias]}' and '{field}'")
            seen[alias] = field

    if DEFAULT_MODEL not in MODEL_PRIORITY:
        errors.append(f"Default model {DEFAULT_MODEL} is not a known model")

    return len(errors) == 0, errors


def ensure_directories() -> None:
    """Create required directories if they don't exist."""
    DATA_PATH.mkdir(parents=True, exist_ok=True)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


if __name__ == "__main__":
    print("=" * 60)
    print("Configuration Validation")
    print("=" * 60)

    is_valid, errors = validate_config()

    if is_valid:
        print("[OK] Configuration is valid")
    else:
        print("[ERROR] Configuration has errors:")
        for error in errors:
            print(f"  - {error}")

    print("\nPaths:")
    print(f"  Project Root: {PROJECT_ROOT}")
    print(f"  Catalog DB: {CATALOG_DB_PATH}")
    print(f"  Config Dir: {CONFIG_DIR}")

    print(f"\nColumn alias fields: {len(COLUMN_ALIASES)}")
