"""
Unit tests for category naming conventions and reconciliation.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from teslashop.catalog_tree import MAIN_CATEGORIES, CategoryNode, subcategory_count
from teslashop.category_naming import (
    build_hierarchy,
    canonical_names,
    reconcile_category,
    reconcile_name,
)


class TestModel3Convention:
    """Raw names carry a model prefix the canonical tree drops."""

    def test_main_category_prefix_stripped_and_code_completed(self):
        assert reconcile_name("Model 3 - BODY", "MODEL_3") == "10 - BODY"

    def test_sub_category_prefix_stripped(self):
        assert reconcile_name("M3 1001 - Bumper and Fascia", "MODEL_3") == "1001 - Bumper and Fascia"

    def test_canonical_name_unchanged(self):
        assert reconcile_name("10 - BODY", "MODEL_3") == "10 - BODY"

    def test_bare_title_is_completed(self):
        assert reconcile_name("wheels and tires", "MODEL_3") == "34 - WHEELS AND TIRES"


class TestModelYConvention:
    """Raw names lack the model prefix the canonical tree requires."""

    def test_prefix_added(self):
        assert reconcile_name("10 - BODY", "MODEL_Y") == "Model Y - 10 - BODY"

    def test_already_prefixed_is_noop(self):
        assert reconcile_name("Model Y - 10 - BODY", "MODEL_Y") == "Model Y - 10 - BODY"

    def test_prefix_case_insensitive(self):
        assert reconcile_name("model y - 10 - BODY", "MODEL_Y") == "Model Y - 10 - BODY"

    def test_name_mentioning_model_passes_through(self):
        assert reconcile_name("Tesla Model Y Accessories", "MODEL_Y") == "Tesla Model Y Accessories"

    def test_unknown_category_keeps_text(self):
        assert reconcile_name("12 - EXTERIOR", "MODEL_Y") == "Model Y - 12 - EXTERIOR"


class TestOtherModels:

    def test_model_s_and_x_pass_through(self):
        assert reconcile_name("Model 3 - BODY", "MODEL_S") == "Model 3 - BODY"
        assert reconcile_name("10 - BODY", "MODEL_X") == "10 - BODY"

    def test_unknown_model_raises(self):
        with pytest.raises(ValueError):
            reconcile_name("BODY", "MODEL_Z")


class TestReconcileCategory:

    def test_subcategory_preferred(self):
        name = reconcile_category("Model 3 - BODY", "M3 1001 - Bumper and Fascia", "MODEL_3")
        assert name == "1001 - Bumper and Fascia"

    def test_falls_back_to_main_category(self):
        assert reconcile_category("10 - BODY", "  ", "MODEL_Y") == "Model Y - 10 - BODY"

    def test_placeholder_when_both_missing(self):
        assert reconcile_category(None, None, "MODEL_3") == "Model 3 Parts"
        assert reconcile_category("", None, "MODEL_X") == "Model X Parts"

    def test_whitespace_collapsed(self):
        assert reconcile_category("Model 3 -  BODY ", None, "MODEL_3") == "10 - BODY"


class TestHierarchy:
    """The seeded tree and the reconciler agree on every name."""

    def test_model3_tree_shape(self):
        root = build_hierarchy("MODEL_3")
        assert root.name == "Model 3"
        assert len(root.children) == len(MAIN_CATEGORIES) == 20
        assert root.count() == 1 + 20 + subcategory_count()
        assert root.children[0].name == "10 - BODY"
        assert root.children[0].children[0].name == "1001 - Bumper and Fascia"

    def test_model_y_tree_is_prefixed(self):
        root = build_hierarchy("MODEL_Y")
        assert root.name == "Model Y"
        assert root.children[0].name == "Model Y - 10 - BODY"
        assert "Tesla Model Y" in root.children[0].description

    def test_every_tree_name_reconciles_to_itself(self):
        for model in ("MODEL_3", "MODEL_Y"):
            names = canonical_names(model)
            for name in names:
                if name in ("Model 3", "Model Y"):
                    continue
                assert reconcile_name(name, model) == name

    def test_model3_raw_names_reach_the_tree(self):
        names = canonical_names("MODEL_3")
        for main in MAIN_CATEGORIES:
            assert reconcile_name(f"Model 3 - {main.title}", "MODEL_3") in names
            for sub in main.subcategories:
                assert reconcile_name(f"M3 {sub.code} - {sub.title}", "MODEL_3") in names

    def test_no_builtin_tree_for_model_s(self):
        with pytest.raises(ValueError):
            build_hierarchy("MODEL_S")

    def test_node_from_dict(self):
        node = CategoryNode.from_dict({
            "name": "Model S",
            "children": [{"name": "Brakes", "description": "Brake parts"}],
        })
        assert node.count() == 2
        assert node.children[0].description == "Brake parts"
        with pytest.raises(ValueError):
            CategoryNode.from_dict({"description": "no name"})
