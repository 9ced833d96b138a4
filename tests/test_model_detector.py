"""
Unit tests for Tesla model detection.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from teslashop.model_detector import (
    count_model_tokens,
    detect_model,
    detect_model_from_filename,
    normalize_model_token,
    resolve_model,
)

HEADER = ["title", "sku", "price_1pc", "main_category"]


class TestFilenameDetection:
    """Filename tokens win over content."""

    def test_model3_filename(self):
        assert detect_model_from_filename("model3_parts.xlsx") == ("MODEL_3", "model3")

    def test_model_y_filename(self):
        assert detect_model_from_filename("model_y_import.csv") == ("MODEL_Y", "model_y")

    def test_short_tokens_need_boundaries(self):
        assert detect_model_from_filename("MY-parts.csv") == ("MODEL_Y", "my")
        assert detect_model_from_filename("items.xlsx") is None
        assert detect_model_from_filename("mystery.csv") is None

    def test_models_word_is_not_model_s(self):
        assert detect_model_from_filename("all_models.csv") is None

    def test_priority_when_several_tokens(self):
        model, _ = detect_model_from_filename("model_y_and_model3.csv")
        assert model == "MODEL_3"

    def test_filename_beats_content(self):
        grid = [HEADER] + [["Model Y Door", "A-1", "10", "Model Y - BODY"]] * 5
        result = detect_model("model3_parts.xlsx", grid)
        assert result.model == "MODEL_3"
        assert result.source == "filename"
        assert result.confidence == "HIGH"
        assert not result.needs_confirmation


class TestContentDetection:
    """Frequency counts over the serialized grid."""

    def test_highest_count_wins(self):
        grid = [
            HEADER,
            ["Model Y Door", "A-1", "10", "Model Y - BODY"],
            ["Model 3 Mirror", "A-2", "10", "M3 1209 - Exterior Mirrors"],
            ["Model Y Seat", "A-3", "10", "Model Y - SEATS"],
        ]
        result = detect_model("parts.csv", grid)
        assert result.model == "MODEL_Y"
        assert result.source == "content"
        assert result.confidence == "MEDIUM"
        assert result.counts["MODEL_Y"] == 4

    def test_tie_breaks_by_priority(self):
        grid = [HEADER, ["Model X Latch", "A-1", "10", "Model S Trim"]]
        result = detect_model("parts.csv", grid)
        assert result.model == "MODEL_S"
        assert result.confidence == "LOW"

    def test_default_when_nothing_matches(self):
        result = detect_model("parts.csv", [HEADER, ["Wiper", "W-1", "5", "Misc"]])
        assert result.model == "MODEL_3"
        assert result.source == "default"
        assert result.confidence == "LOW"
        assert result.needs_confirmation

    def test_none_cells_ignored(self):
        counts = count_model_tokens([[None, "model_3 part"], [None, None]])
        assert counts["MODEL_3"] == 1

    def test_idempotent(self):
        grid = [HEADER, ["Model Y Door", "A-1", "10", "10 - BODY"]]
        first = detect_model("upload.csv", grid)
        second = detect_model("upload.csv", grid)
        assert first == second


class TestOverride:

    def test_override_supersedes_detection(self):
        result = resolve_model("model3_parts.xlsx", [HEADER], "model_y")
        assert result.model == "MODEL_Y"
        assert result.source == "override"

    def test_normalize_token_variants(self):
        assert normalize_model_token("model-x") == "MODEL_X"
        assert normalize_model_token(" MODEL_S ") == "MODEL_S"

    def test_invalid_token(self):
        with pytest.raises(ValueError):
            normalize_model_token("MODEL_Z")
