"""
Category Auto-Setup - Idempotent creation of the Tesla category tree

Materializes root -> main categories -> subcategories for one model, either
from the built-in catalog (MODEL_3, MODEL_Y) or from a supplied hierarchy.

Existing categories (same name or slug) are reused and counted as skipped, so
running the setup twice creates nothing the second time. Sort orders come from
an explicit SortOrderSequence seeded at max(sort_order) + 1. A failure on one
node is recorded and the run continues with its siblings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import duckdb

from teslashop.catalog_tree import CategoryNode
from teslashop.category_naming import build_hierarchy
from teslashop.config import DEFAULT_MODEL
from teslashop.logger import debug_watcher, get_logger
from teslashop.model_detector import normalize_model_token
from teslashop.store import CatalogStore

logger = get_logger(__name__)

MAX_DEPTH = 3

LEVEL_LABELS = {1: "root", 2: "main categories", 3: "subcategories"}


class SortOrderSequence:
    """Hands out consecutive sort-order values for one setup run."""

    def __init__(self, start: int):
        self._next = start

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    @property
    def peek(self) -> int:
        return self._next


@dataclass
class AutoSetupResult:
    root_name: str
    total_created: int = 0
    total_skipped: int = 0
    errors: list[str] = field(default_factory=list)
    created_by_level: dict[int, int] = field(default_factory=dict)
    skipped_by_level: dict[int, int] = field(default_factory=dict)

    def record(self, level: int, created: bool) -> None:
        if created:
            self.total_created += 1
            self.created_by_level[level] = self.created_by_level.get(level, 0) + 1
        else:
            self.total_skipped += 1
            self.skipped_by_level[level] = self.skipped_by_level.get(level, 0) + 1

    @property
    def summary(self) -> str:
        lines = [
            f"Successfully processed all categories! Created {self.total_created} new categories, "
            f"skipped {self.total_skipped} existing ones.",
            self.root_name,
        ]
        for level in sorted(set(self.created_by_level) | set(self.skipped_by_level)):
            label = LEVEL_LABELS.get(level, f"level {level}")
            created = self.created_by_level.get(level, 0)
            skipped = self.skipped_by_level.get(level, 0)
            lines.append(f"  Level {level} ({label}): {created} created, {skipped} skipped")
        if self.errors:
            lines.append(f"  {len(self.errors)} error(s)")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "totalCreated": self.total_created,
            "totalSkipped": self.total_skipped,
            "errors": list(self.errors),
            "message": self.summary,
        }


def _create_node(
    store: CatalogStore,
    node: CategoryNode,
    parent_id: str | None,
    parent_level: int,
    depth: int,
    sequence: SortOrderSequence,
    result: AutoSetupResult,
) -> str | None:
    """
    Create or reuse one category, then its children.

    ``depth`` is the node's position in the requested tree and only labels the
    summary. The stored level always follows the parent actually attached to,
    which differs from ``depth`` when an existing category is reused.
    """
    level = parent_level + 1
    if level > MAX_DEPTH:
        result.errors.append(f'Failed to create "{node.name}": categories are at most {MAX_DEPTH} levels deep')
        return None

    try:
        existing = store.find_category(node.name)
        if existing is not None:
            logger.debug(f"Skipping existing category: {node.name}")
            category_id, created = existing["id"], False
            level = existing["level"]
        else:
            category_id, created = store.insert_category(
                node.name,
                description=node.description or None,
                parent_id=parent_id,
                level=level,
                sort_order=sequence.next(),
            )
            if created:
                logger.debug(f"Created Level {level}: {node.name}")
            else:
                logger.debug(f"Category {node.name} appeared concurrently; reusing it")
                level = store.get_category(category_id)["level"]
    except duckdb.Error as e:
        message = f'Failed to create "{node.name}": {e}'
        logger.error(message)
        result.errors.append(message)
        return None

    result.record(depth, created)

    for child in node.children:
        _create_node(store, child, category_id, level, depth + 1, sequence, result)
    return category_id


def resolve_hierarchy(model: str | None = None, hierarchy: CategoryNode | dict[str, Any] | None = None) -> CategoryNode:
    """
    Pick the tree to materialize.

    Raises:
        ValueError: Bad model token, malformed hierarchy, or a model without a
            built-in tree and no hierarchy supplied.
    """
    if hierarchy is not None:
        if isinstance(hierarchy, CategoryNode):
            return hierarchy
        return CategoryNode.from_dict(hierarchy)
    return build_hierarchy(normalize_model_token(model) if model else DEFAULT_MODEL)


@debug_watcher
def run_auto_setup(
    store: CatalogStore,
    model: str | None = None,
    hierarchy: CategoryNode | dict[str, Any] | None = None,
) -> AutoSetupResult:
    """
    Create the category tree, skipping categories that already exist.

    Args:
        store: Target catalog store.
        model: Model token for the built-in tree (defaults to MODEL_3).
        hierarchy: Optional explicit tree; names are used verbatim.

    Returns:
        AutoSetupResult with created/skipped counts, errors and a summary.
    """
    root = resolve_hierarchy(model, hierarchy)
    sequence = SortOrderSequence(store.max_sort_order() + 1)
    result = AutoSetupResult(root_name=root.name)

    logger.info(f"Starting category hierarchy creation for '{root.name}' ({root.count()} nodes)")
    _create_node(store, root, None, 0, 1, sequence, result)
    logger.info(
        f"Category setup completed: {result.total_created} created, "
        f"{result.total_skipped} skipped, {len(result.errors)} errors"
    )
    return result
