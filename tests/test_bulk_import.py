"""
Tests for the import preview builder and the confirmed import.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from teslashop.bulk_import import (
    ImportRow,
    build_preview,
    commit_import,
    preview_grid,
    validate_row,
)
from teslashop.category_setup import run_auto_setup
from teslashop.store import CatalogStore
from teslashop.template import template_csv, template_xlsx

MODEL_Y_CSV = (
    b"title,sku,price_1pc,main_category\n"
    b"Door Handle,DH-001,29.99,10 - BODY\n"
    b"Bumper,BN-002,,12 - EXTERIOR\n"
    b",,,\n"
)


class TestModelYScenario:
    """Three-row CSV named model_y_import.csv."""

    def setup_method(self):
        self.result = build_preview(MODEL_Y_CSV, "model_y_import.csv").to_dict()

    def test_detected_model(self):
        assert self.result["success"] is True
        assert self.result["detectedModel"] == "MODEL_Y"
        assert self.result["detection"]["source"] == "filename"

    def test_blank_row_skipped(self):
        assert len(self.result["data"]) == 2
        assert len(self.result["preview"]) == 2
        assert self.result["totalRows"] == 3
        assert self.result["validRows"] == 2
        assert self.result["errorRows"] == 0

    def test_first_row(self):
        row = self.result["preview"][0]
        assert row["category"] == "Model Y - 10 - BODY"
        assert row["price"] == 29.99
        assert row["errors"] == []
        assert row["hasErrors"] is False
        assert row["rowNumber"] == 2
        assert row["compatibleModels"] == "MODEL_Y"
        assert row["slug"] == "door-handle"

    def test_second_row_empty_price_is_not_an_error(self):
        row = self.result["preview"][1]
        assert row["category"] == "Model Y - 12 - EXTERIOR"
        assert row["price"] == 0
        assert row["errors"] == []
        assert row["rowNumber"] == 3

    def test_defaults_applied(self):
        row = self.result["data"][0]
        assert row["stockQuantity"] == 10
        assert row["isActive"] is True
        assert row["trackQuantity"] is True
        assert row["lowStockThreshold"] == 5

    def test_price_stats(self):
        assert self.result["priceParsingStats"] == {"successes": 2, "errors": 0}


class TestRowValidation:

    def _preview(self, rows, filename="parts.csv", model=None):
        return preview_grid([["title", "sku", "price_1pc"]] + rows, filename, model)

    def test_short_name_and_sku_rejected(self):
        errors = validate_row(ImportRow(name="ab", sku="xy", price=10))
        assert len(errors) == 2
        assert "name" in errors[0]
        assert "SKU" in errors[1]

    def test_three_characters_accepted(self):
        assert validate_row(ImportRow(name="abc", sku="xyz", price=10)) == []

    def test_unparseable_price_quotes_original_text(self):
        preview = self._preview([["Door Handle", "DH-001", "N/A"]])
        row = preview.rows[0]
        assert row.has_errors
        assert any("N/A" in e for e in row.errors)
        assert row.row.price == 0
        assert preview.price_errors == 1

    def test_negative_price_flagged(self):
        preview = self._preview([["Door Handle", "DH-001", "-5"]])
        assert preview.rows[0].has_errors
        assert "negative" in preview.rows[0].errors[0]
        assert preview.rows[0].row.price == -5

    def test_currency_text_price(self):
        preview = self._preview([["Door Handle", "DH-001", "$1,234.56 CAD"]])
        assert preview.rows[0].row.price == 1234.56
        assert not preview.rows[0].has_errors

    def test_error_rows_still_reported(self):
        preview = self._preview([["ab", "DH-001", "10"], ["Door Handle", "DH-002", "10"]])
        assert preview.error_rows == 1
        assert preview.valid_rows == 1
        assert [r.row_number for r in preview.rows] == [2, 3]

    def test_model_override(self):
        preview = self._preview([["Door Handle", "DH-001", "10"]], filename="model3.csv", model="MODEL_Y")
        assert preview.detection.model == "MODEL_Y"
        assert preview.rows[0].row.compatible_models == "MODEL_Y"
        assert preview.rows[0].row.category == "Model Y Parts"


class TestDescriptionAndDimensions:

    def test_full_row(self):
        grid = [
            ["title", "sku", "oe_number", "price_1pc", "price_10pc", "price_50pc", "price_100pc",
             "main_category", "subcategory", "weight", "length", "width", "height",
             "unit_packing", "full_packing", "stock"],
            ["MODEL 3 Front\nBumper", "BN-TE-3-0004", "1084168-SO-5-E", "44", "41", "39", "37",
             "Model 3 - BODY", "M3 1001 - Bumper and Fascia", "5.2", "185", "58", "45",
             "1 pc/box", "4 pcs/carton", "3"],
        ]
        row = preview_grid(grid, "model3_parts.csv").rows[0].row
        assert row.name == "MODEL 3 Front Bumper"
        assert row.category == "1001 - Bumper and Fascia"
        assert row.subcategory == "M3 1001 - Bumper and Fascia"
        assert row.dimensions == "185*58*45"
        assert row.weight == 5.2
        assert row.stock_quantity == 3
        assert row.description == (
            "OE: 1084168-SO-5-E | Weight: 5.2 | Dimensions: 185*58*45 | Unit Packing: 1 pc/box"
            " | Full Packing: 4 pcs/carton | Bulk Pricing - 10pc: 41, 50pc: 39, 100pc: 37"
        )

    def test_dimensions_column_wins(self):
        grid = [["title", "sku", "price", "dimensions", "length"], ["Door Handle", "DH-001", "5", "15*8*3", "99"]]
        assert preview_grid(grid, "parts.csv").rows[0].row.dimensions == "15*8*3"

    def test_zero_stock_uses_default(self):
        grid = [["title", "sku", "price", "stock"], ["Door Handle", "DH-001", "5", "0"]]
        assert preview_grid(grid, "parts.csv").rows[0].row.stock_quantity == 10

    def test_empty_description(self):
        grid = [["title", "sku", "price"], ["Door Handle", "DH-001", "5"]]
        assert preview_grid(grid, "parts.csv").rows[0].row.description == ""


class TestTemplateRoundTrip:

    def test_csv_template_previews_cleanly(self):
        preview = build_preview(template_csv(), "tesla-import-template.csv")
        assert preview.error_rows == 0
        assert preview.rows[0].row.sku == "BN-TE-3-0004"
        assert preview.rows[0].row.category == "1001 - Bumper and Fascia"

    def test_xlsx_template_previews_cleanly(self):
        preview = build_preview(template_xlsx(), "tesla-import-template.xlsx")
        assert len(preview.rows) == 2
        assert preview.error_rows == 0
        assert preview.rows[1].row.category == "1145 - Exterior Door Handles"


class TestCommitImport:

    def setup_method(self):
        self.store = CatalogStore(":memory:")

    def teardown_method(self):
        self.store.close()

    def _rows(self):
        return preview_grid(
            [
                ["title", "sku", "price_1pc", "subcategory", "oe_number"],
                ["Front Bumper", "BN-TE-3-0004", "44", "M3 1001 - Bumper and Fascia", "1084168-SO-5-E"],
                ["Unknown Part", "UP-TE-3-0001", "12", "Something Else", ""],
            ],
            "model3_parts.csv",
        ).rows

    def test_products_filed_under_seeded_categories(self):
        run_auto_setup(self.store, model="MODEL_3")
        summary = commit_import(self.store, [r.row for r in self._rows()])
        assert summary.successful == 2
        assert summary.failed == 0
        assert summary.categories_created == []

        bumper = self.store.get_product_by_sku("BN-TE-3-0004")
        category = self.store.get_category(bumper["category_id"])
        assert category["name"] == "1001 - Bumper and Fascia"
        assert bumper["short_description"] == "Front Bumper"
        assert bumper["meta_title"] == "Front Bumper"
        assert bumper["meta_description"] == "OE: 1084168-SO-5-E"
        assert bumper["is_featured"] is False

        # Unknown category falls back to the model root
        unknown = self.store.get_product_by_sku("UP-TE-3-0001")
        assert self.store.get_category(unknown["category_id"])["name"] == "Model 3"

    def test_uncategorized_created_once_without_tree(self):
        summary = commit_import(self.store, [r.row for r in self._rows()])
        assert summary.successful == 2
        assert summary.categories_created == ["Uncategorized"]
        category = self.store.find_category_by_name("Uncategorized")
        assert category["sort_order"] == 999
        assert category["level"] == 1

    def test_duplicate_sku_reported(self):
        rows = [r.row for r in self._rows()]
        commit_import(self.store, rows)
        summary = commit_import(self.store, rows)
        assert summary.successful == 0
        assert summary.failed == 2
        assert summary.errors[0] == {
            "row": 2,
            "sku": "BN-TE-3-0004",
            "message": 'Product with SKU "BN-TE-3-0004" already exists',
        }

    def test_camel_case_payload(self):
        payload = [r.row.to_dict() for r in self._rows()]
        summary = commit_import(self.store, payload)
        assert summary.successful == 2
        assert summary.to_dict()["message"] == "Successfully imported 2 products. Created 1 new categories."

    def test_missing_sku_is_row_error(self):
        summary = commit_import(self.store, [{"name": "Door Handle", "price": 5}])
        assert summary.failed == 1
        assert summary.errors[0]["row"] == 2
        assert "SKU" in summary.errors[0]["message"]

    def test_bad_values_reported_per_row(self):
        payload = [
            {"name": "Door Handle", "sku": "DH-001", "price": "call us"},
            {"name": "Door Handle Right", "sku": "DH-002", "price": 10, "stockQuantity": "lots"},
            {"name": 1234, "sku": "DH-003", "price": 10},
            {"name": "Front Bumper", "sku": "BN-001", "price": "44.50", "stockQuantity": "3"},
        ]
        summary = commit_import(self.store, payload)
        assert summary.successful == 1
        assert summary.failed == 3
        assert [e["row"] for e in summary.errors] == [2, 3, 4]
        assert summary.errors[0]["message"] == 'Invalid price "call us"'
        assert "stock quantity" in summary.errors[1]["message"]
        assert summary.errors[2]["message"] == "Product name must be text"

        bumper = self.store.get_product_by_sku("BN-001")
        assert bumper["price"] == 44.5
        assert bumper["stock_quantity"] == 3

    def test_null_values_use_defaults(self):
        summary = commit_import(self.store, [
            {"name": "Door Handle", "sku": "DH-001", "price": None, "stockQuantity": None,
             "lowStockThreshold": None, "weight": None, "price10pc": None},
            {"name": "Front Bumper", "sku": "BN-001", "price": 44},
        ])
        assert summary.successful == 2
        assert summary.failed == 0
        handle = self.store.get_product_by_sku("DH-001")
        assert handle["price"] == 0
        assert handle["stock_quantity"] == 10
        assert handle["low_stock_threshold"] == 5
