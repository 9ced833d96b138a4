"""
Model Detection Module - Tesla Model Identification for Uploads

Infers the single Tesla model an uploaded parts file describes using:
1. Filename analysis (model tokens in the filename, fixed priority 3, Y, S, X)
2. Content analysis (frequency of model-like tokens across every cell)
3. Default (MODEL_3) when nothing matches

The result carries its evidence (source, matched token, per-model counts) and
a confidence level so callers can ask for manual confirmation on weak guesses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from teslashop.config import DEFAULT_MODEL, MODEL_3, MODEL_PRIORITY, MODEL_S, MODEL_X, MODEL_Y
from teslashop.logger import get_logger

logger = get_logger(__name__)

# Filename tokens per model, checked in MODEL_PRIORITY order.
FILENAME_TOKENS: dict[str, tuple[str, ...]] = {
    MODEL_3: ("model3", "model_3", "model-3", "model 3", "m3"),
    MODEL_Y: ("modely", "model_y", "model-y", "model y", "my"),
    MODEL_S: ("model_s", "model-s", "model s", "ms"),
    MODEL_X: ("modelx", "model_x", "model-x", "model x", "mx"),
}

# Content patterns per model, applied to the lower-cased serialized grid.
CONTENT_PATTERNS: dict[str, re.Pattern] = {
    MODEL_3: re.compile(r"model[ _-]?3|\bm3\b"),
    MODEL_Y: re.compile(r"model[ _-]?y\b"),
    MODEL_S: re.compile(r"model[ _-]s\b"),
    MODEL_X: re.compile(r"model[ _-]?x\b"),
}


@dataclass
class DetectionResult:
    """Model chosen for a whole upload, with the evidence behind it."""

    model: str
    source: str  # "filename", "content", "default", "override"
    matched_token: str = ""
    counts: dict[str, int] = field(default_factory=dict)
    confidence: str = "LOW"  # "HIGH", "MEDIUM", "LOW"

    @property
    def needs_confirmation(self) -> bool:
        return self.confidence != "HIGH"

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "source": self.source,
            "matchedToken": self.matched_token,
            "counts": dict(self.counts),
            "confidence": self.confidence,
            "needsConfirmation": self.needs_confirmation,
        }


def _token_pattern(token: str) -> re.Pattern:
    # Two-letter aliases such as "m3" or "ms" must not be glued to other
    # letters ("items.xlsx" is not Model S).
    if len(token) <= 2:
        return re.compile(rf"(?<![a-z]){re.escape(token)}(?![a-z])")
    return re.compile(re.escape(token))


_FILENAME_PATTERNS: dict[str, list[tuple[str, re.Pattern]]] = {
    model: [(token, _token_pattern(token)) for token in tokens]
    for model, tokens in FILENAME_TOKENS.items()
}


def detect_model_from_filename(filename: str | None) -> tuple[str, str] | None:
    """
    Match model tokens in a filename.

    Examples:
        "model3_parts.xlsx" -> ("MODEL_3", "model3")
        "model_y_import.csv" -> ("MODEL_Y", "model_y")
        "parts.csv" -> None

    Returns:
        (model, matched_token) for the first model in priority order, or None.
    """
    if not filename:
        return None
    name = filename.lower()
    for model in MODEL_PRIORITY:
        for token, pattern in _FILENAME_PATTERNS[model]:
            if pattern.search(name):
                return model, token
    return None


def serialize_grid(grid: pd.DataFrame | list[list[Any]]) -> str:
    """Flatten every non-empty cell into one lower-cased string."""
    rows = grid.values.tolist() if isinstance(grid, pd.DataFrame) else grid
    parts = []
    for row in rows:
        for cell in row:
            if cell is None:
                continue
            text = str(cell)
            if text and text.lower() != "nan":
                parts.append(text)
    return " ".join(parts).lower()


def count_model_tokens(grid: pd.DataFrame | list[list[Any]]) -> dict[str, int]:
    text = serialize_grid(grid)
    return {model: len(CONTENT_PATTERNS[model].findall(text)) for model in MODEL_PRIORITY}


def detect_model(filename: str | None, grid: pd.DataFrame | list[list[Any]]) -> DetectionResult:
    """
    Infer the Tesla model for an upload.

    Filename tokens win outright. Otherwise the model with the most content
    matches wins; equal counts resolve by MODEL_PRIORITY (3 > Y > S > X).

    Args:
        filename: Original upload filename.
        grid: Parsed sheet (header row included).

    Returns:
        DetectionResult; model defaults to MODEL_3 when nothing matches.
    """
    filename_hit = detect_model_from_filename(filename)
    if filename_hit:
        model, token = filename_hit
        logger.debug(f"Model {model} detected from filename token '{token}'")
        return DetectionResult(model=model, source="filename", matched_token=token, confidence="HIGH")

    counts = count_model_tokens(grid)
    best_count = max(counts.values()) if counts else 0
    if best_count == 0:
        logger.debug(f"No model tokens found in {filename}; defaulting to {DEFAULT_MODEL}")
        return DetectionResult(model=DEFAULT_MODEL, source="default", counts=counts, confidence="LOW")

    leaders = [model for model in MODEL_PRIORITY if counts[model] == best_count]
    model = leaders[0]
    confidence = "MEDIUM" if len(leaders) == 1 else "LOW"
    logger.debug(f"Model {model} detected from content counts {counts} ({confidence})")
    return DetectionResult(
        model=model,
        source="content",
        matched_token=CONTENT_PATTERNS[model].pattern,
        counts=counts,
        confidence=confidence,
    )


def normalize_model_token(token: str) -> str:
    """
    Validate a manual override token.

    Raises:
        ValueError: Token is not one of MODEL_3, MODEL_Y, MODEL_S, MODEL_X.
    """
    candidate = (token or "").strip().upper().replace(" ", "_").replace("-", "_")
    if candidate not in MODEL_PRIORITY:
        raise ValueError(f"Invalid model override: {token!r}. Expected one of {', '.join(MODEL_PRIORITY)}")
    return candidate


def resolve_model(
    filename: str | None,
    grid: pd.DataFrame | list[list[Any]],
    override: str | None = None,
) -> DetectionResult:
    """Apply a manual override when given, otherwise detect."""
    if override:
        model = normalize_model_token(override)
        return DetectionResult(model=model, source="override", matched_token=override, confidence="HIGH")
    return detect_model(filename, grid)
