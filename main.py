"""
Tesla Parts Back Office - Command Line Entry Point

Runs the bulk-import pipeline and catalog maintenance without the HTTP API:

1. preview           Read a spreadsheet, detect the model, validate every row
2. import            Preview, then store the valid rows as products
3. setup-categories  Create the Tesla category tree (idempotent)
4. template          Write the import template (.xlsx or .csv)
5. serve             Start the FastAPI app with uvicorn
6. config            Print the effective configuration

Usage:
    python main.py preview <file> [--model MODEL_Y] [--json]
    python main.py import <file> [--model MODEL_Y] [--db data/catalog.duckdb]
    python main.py setup-categories [--model MODEL_3] [--hierarchy tree.json]
    python main.py template <out.xlsx|out.csv>
    python main.py serve [--host 127.0.0.1] [--port 8000]
    python main.py config
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from teslashop.bulk_import import build_preview, commit_import
from teslashop.category_setup import run_auto_setup
from teslashop.config import CATALOG_DB_PATH, ensure_directories, load_config, validate_config
from teslashop.store import CatalogStore
from teslashop.template import write_template


def log(message: str, level: str = "INFO") -> None:
    """Simple console output for CLI runs."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{level}] {message}")


def _open_store(db_path: str | None) -> CatalogStore:
    ensure_directories()
    return CatalogStore(db_path or CATALOG_DB_PATH)


def cmd_preview(args: argparse.Namespace) -> int:
    path = Path(args.file)
    preview = build_preview(path.read_bytes(), path.name, args.model)

    if args.json:
        print(json.dumps(preview.to_dict(), indent=2, default=str))
        return 0

    detection = preview.detection
    log(f"Detected model: {detection.model} (source={detection.source}, confidence={detection.confidence})")
    if detection.needs_confirmation:
        log("Model guess is not certain; pass --model to override", "WARN")
    log(
        f"Rows: {preview.total_rows} total, {preview.valid_rows} valid, {preview.error_rows} with errors; "
        f"prices parsed {preview.price_successes}, failed {preview.price_errors}"
    )
    for row in preview.rows:
        if row.has_errors:
            log(f"Row {row.row_number} ({row.row.sku or 'no sku'}): {'; '.join(row.errors)}", "WARN")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    path = Path(args.file)
    preview = build_preview(path.read_bytes(), path.name, args.model)
    rows = [r.row for r in preview.rows if args.include_errors or not r.has_errors]
    log(f"Importing {len(rows)} of {len(preview.rows)} rows as {preview.detection.model}")

    store = _open_store(args.db)
    try:
        summary = commit_import(store, rows)
    finally:
        store.close()

    log(summary.message)
    for error in summary.errors:
        log(f"Row {error['row']} ({error['sku']}): {error['message']}", "WARN")
    return 0 if summary.failed == 0 else 1


def cmd_setup_categories(args: argparse.Namespace) -> int:
    hierarchy = None
    if args.hierarchy:
        with open(args.hierarchy, "r", encoding="utf-8") as f:
            hierarchy = json.load(f)

    store = _open_store(args.db)
    try:
        result = run_auto_setup(store, model=args.model, hierarchy=hierarchy)
    finally:
        store.close()

    print(result.summary)
    for error in result.errors:
        log(error, "ERROR")
    return 0 if not result.errors else 1


def cmd_template(args: argparse.Namespace) -> int:
    path = write_template(args.output)
    log(f"Template written to {path}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    print(json.dumps(load_config(), indent=2, default=str))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from teslashop.app import create_app

    app = create_app(_open_store(args.db))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tesla Parts Back Office - bulk import and catalog tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py preview model_y_import.csv          # Validate without storing
  python main.py import parts.xlsx --model MODEL_3   # Store valid rows
  python main.py setup-categories --model MODEL_Y    # Seed the Model Y tree
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_preview = sub.add_parser("preview", help="Validate a spreadsheet and show the import preview")
    p_preview.add_argument("file", help="Path to .csv, .xlsx or .xls file")
    p_preview.add_argument("--model", "-m", default=None, help="Model override (MODEL_3, MODEL_Y, MODEL_S, MODEL_X)")
    p_preview.add_argument("--json", action="store_true", help="Print the full preview response as JSON")
    p_preview.set_defaults(func=cmd_preview)

    p_import = sub.add_parser("import", help="Import a spreadsheet into the catalog")
    p_import.add_argument("file", help="Path to .csv, .xlsx or .xls file")
    p_import.add_argument("--model", "-m", default=None, help="Model override")
    p_import.add_argument("--db", default=None, help="DuckDB catalog path (default data/catalog.duckdb)")
    p_import.add_argument("--include-errors", action="store_true", help="Also submit rows that failed validation")
    p_import.set_defaults(func=cmd_import)

    p_setup = sub.add_parser("setup-categories", help="Create the Tesla category tree")
    p_setup.add_argument("--model", "-m", default=None, help="Model with a built-in tree (MODEL_3 or MODEL_Y)")
    p_setup.add_argument("--hierarchy", default=None, help="JSON file with a {name, description, children} tree")
    p_setup.add_argument("--db", default=None, help="DuckDB catalog path")
    p_setup.set_defaults(func=cmd_setup_categories)

    p_template = sub.add_parser("template", help="Write the import template")
    p_template.add_argument("output", help="Output path; .xlsx or .csv")
    p_template.set_defaults(func=cmd_template)

    p_config = sub.add_parser("config", help="Print the effective configuration")
    p_config.set_defaults(func=cmd_config)

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--db", default=None, help="DuckDB catalog path")
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)

    is_valid, errors = validate_config()
    if not is_valid:
        log(f"Configuration errors: {errors}", "ERROR")
        return 1

    try:
        return args.func(args)
    except (FileNotFoundError, ValueError) as e:
        log(str(e), "ERROR")
        return 1


if __name__ == "__main__":
    sys.exit(main())
