"""
Tests for the idempotent category auto-setup.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from teslashop.catalog_tree import subcategory_count
from teslashop.category_setup import SortOrderSequence, run_auto_setup
from teslashop.store import CatalogStore

TREE_SIZE = 1 + 20 + subcategory_count()


class TestAutoSetup:

    def setup_method(self):
        self.store = CatalogStore(":memory:")

    def teardown_method(self):
        self.store.close()

    def test_first_run_creates_whole_tree(self):
        result = run_auto_setup(self.store, model="MODEL_3")
        assert result.total_created == TREE_SIZE
        assert result.total_skipped == 0
        assert result.errors == []
        assert self.store.count_categories() == TREE_SIZE

    def test_second_run_is_noop(self):
        first = run_auto_setup(self.store, model="MODEL_3")
        second = run_auto_setup(self.store, model="MODEL_3")
        assert second.total_created == 0
        assert second.total_skipped == first.total_created
        assert self.store.count_categories() == TREE_SIZE

    def test_levels_and_parents(self):
        run_auto_setup(self.store, model="MODEL_Y")
        root = self.store.find_category_by_name("Model Y")
        main = self.store.find_category_by_name("Model Y - 10 - BODY")
        sub = self.store.find_category_by_name("Model Y - 1001 - Bumper and Fascia")
        assert root["level"] == 1 and root["parent_id"] is None
        assert main["level"] == 2 and main["parent_id"] == root["id"]
        assert sub["level"] == 3 and sub["parent_id"] == main["id"]
        assert sub["slug"] == "model-y-1001-bumper-and-fascia"

    def test_sort_order_is_sequential_after_existing(self):
        self.store.insert_category("Accessories", sort_order=41)
        run_auto_setup(self.store, model="MODEL_3")
        orders = [c["sort_order"] for c in self.store.list_categories() if c["name"] != "Accessories"]
        assert sorted(orders) == list(range(42, 42 + TREE_SIZE))

    def test_both_models_coexist(self):
        run_auto_setup(self.store, model="MODEL_3")
        result = run_auto_setup(self.store, model="MODEL_Y")
        assert result.total_created == TREE_SIZE
        assert self.store.count_categories() == 2 * TREE_SIZE

    def test_existing_parent_still_gets_children(self):
        self.store.insert_category("Model 3", level=1, sort_order=1)
        result = run_auto_setup(self.store, model="MODEL_3")
        assert result.total_skipped == 1
        assert result.total_created == TREE_SIZE - 1
        root = self.store.find_category_by_name("Model 3")
        main = self.store.find_category_by_name("10 - BODY")
        assert main["parent_id"] == root["id"]

    def test_slug_collision_counts_as_skipped(self):
        # Same slug as "10 - BODY"
        self.store.insert_category("10 BODY", sort_order=1)
        result = run_auto_setup(self.store, model="MODEL_3")
        assert result.total_skipped == 1
        assert self.store.find_category_by_name("10 - BODY") is None
        # Children were attached to the existing category
        sub = self.store.find_category_by_name("1001 - Bumper and Fascia")
        existing = self.store.find_category_by_name("10 BODY")
        assert sub["parent_id"] == existing["id"]
        assert sub["level"] == existing["level"] + 1

    def test_reused_category_sets_child_levels(self):
        other_id, _ = self.store.insert_category("Other", level=1, sort_order=1)
        self.store.insert_category("Model 3", parent_id=other_id, level=2, sort_order=2)
        result = run_auto_setup(self.store, model="MODEL_3")

        root = self.store.find_category_by_name("Model 3")
        main = self.store.find_category_by_name("10 - BODY")
        assert main["level"] == root["level"] + 1 == 3
        assert main["parent_id"] == root["id"]
        # A level-3 parent cannot take children
        assert self.store.find_category_by_name("1001 - Bumper and Fascia") is None
        assert len(result.errors) == subcategory_count()
        assert all(c["level"] <= 3 for c in self.store.list_categories())

    def test_custom_hierarchy_names_used_verbatim(self):
        result = run_auto_setup(self.store, hierarchy={
            "name": "Model S",
            "description": "Tesla Model S parts",
            "children": [
                {"name": "Model S - BRAKES", "children": [{"name": "MS 3301 - Brake Discs"}]},
            ],
        })
        assert result.total_created == 3
        assert self.store.find_category_by_name("MS 3301 - Brake Discs")["level"] == 3

    def test_too_deep_hierarchy_reports_error(self):
        result = run_auto_setup(self.store, hierarchy={
            "name": "A", "children": [{"name": "B", "children": [{"name": "C", "children": [{"name": "D"}]}]}],
        })
        assert result.total_created == 3
        assert result.errors == ['Failed to create "D": categories are at most 3 levels deep']

    def test_model_s_without_hierarchy_rejected(self):
        with pytest.raises(ValueError):
            run_auto_setup(self.store, model="MODEL_S")

    def test_summary_and_payload(self):
        result = run_auto_setup(self.store, model="MODEL_3")
        payload = result.to_dict()
        assert payload["success"] is True
        assert payload["totalCreated"] == TREE_SIZE
        lines = payload["message"].splitlines()
        assert lines[0].startswith("Successfully processed all categories!")
        assert lines[1] == "Model 3"
        assert "Level 2 (main categories): 20 created, 0 skipped" in payload["message"]


def test_sort_order_sequence():
    sequence = SortOrderSequence(5)
    assert sequence.next() == 5
    assert sequence.next() == 6
    assert sequence.peek == 7
