"""
Category Naming - Per-Model Naming Conventions and Category Reconciliation

Canonical category names differ per Tesla model:
- Model 3 (Convention A): bare codes, e.g. "10 - BODY", "1001 - Bumper and Fascia"
- Model Y (Convention B): model prefix, e.g. "Model Y - 10 - BODY"
- Model S / Model X: no convention, names pass through

The same NamingConvention descriptor drives both the spreadsheet reconciler
(reconcile_category) and the canonical tree used by category auto-setup
(build_hierarchy), so imported rows and seeded categories always agree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from teslashop.catalog_tree import MAIN_CATEGORIES, CategoryNode, main_code_for_title
from teslashop.config import MODEL_3, MODEL_DISPLAY_NAMES, MODEL_S, MODEL_X, MODEL_Y
from teslashop.logger import get_logger

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NamingConvention:
    """How raw category strings map to canonical names for one model."""

    model: str
    display_name: str
    strip_prefixes: tuple[str, ...] = ()
    add_prefix: str = ""
    complete_main_titles: bool = False

    @property
    def placeholder(self) -> str:
        return f"{self.display_name} Parts"

    def canonical(self, core: str) -> str:
        """Apply the convention to an already stripped "<code> - <title>" name."""
        return f"{self.add_prefix}{core}"


CONVENTIONS: dict[str, NamingConvention] = {
    MODEL_3: NamingConvention(
        model=MODEL_3,
        display_name=MODEL_DISPLAY_NAMES[MODEL_3],
        strip_prefixes=("Model 3 - ", "M3 "),
        complete_main_titles=True,
    ),
    MODEL_Y: NamingConvention(
        model=MODEL_Y,
        display_name=MODEL_DISPLAY_NAMES[MODEL_Y],
        strip_prefixes=("Model Y - ",),
        add_prefix="Model Y - ",
        complete_main_titles=True,
    ),
    MODEL_S: NamingConvention(model=MODEL_S, display_name=MODEL_DISPLAY_NAMES[MODEL_S]),
    MODEL_X: NamingConvention(model=MODEL_X, display_name=MODEL_DISPLAY_NAMES[MODEL_X]),
}


def get_convention(model: str) -> NamingConvention:
    """
    Raises:
        ValueError: Unknown model tag.
    """
    try:
        return CONVENTIONS[model]
    except KeyError:
        raise ValueError(f"Unknown model: {model}") from None


def has_builtin_tree(model: str) -> bool:
    return get_convention(model).complete_main_titles


def _complete_main_title(core: str) -> str:
    code = main_code_for_title(core)
    return f"{code} - {core.strip().upper()}" if code else core


def reconcile_name(raw: str, model: str) -> str:
    """
    Map one raw category string to the model's canonical form.

    Examples:
        ("M3 1001 - Bumper and Fascia", MODEL_3) -> "1001 - Bumper and Fascia"
        ("Model 3 - BODY", MODEL_3) -> "10 - BODY"
        ("10 - BODY", MODEL_Y) -> "Model Y - 10 - BODY"
        ("Model Y - 10 - BODY", MODEL_Y) -> "Model Y - 10 - BODY"
        ("Brake Pads", MODEL_S) -> "Brake Pads"
    """
    convention = get_convention(model)
    text = _WHITESPACE.sub(" ", raw).strip()

    core = text
    stripped = False
    for prefix in convention.strip_prefixes:
        if core.lower().startswith(prefix.lower()):
            core = core[len(prefix):].strip()
            stripped = True
            break

    # Already mentions the model somewhere other than the prefix slot
    if convention.add_prefix and not stripped and convention.display_name.lower() in text.lower():
        return text

    if convention.complete_main_titles:
        core = _complete_main_title(core)

    return convention.canonical(core)


@lru_cache(maxsize=None)
def canonical_names(model: str) -> frozenset[str]:
    """Every name the built-in tree for ``model`` contains (empty for S/X)."""
    convention = get_convention(model)
    if not has_builtin_tree(model):
        return frozenset()
    names = {convention.display_name}
    for main in MAIN_CATEGORIES:
        names.add(convention.canonical(f"{main.code} - {main.title}"))
        for sub in main.subcategories:
            names.add(convention.canonical(f"{sub.code} - {sub.title}"))
    return frozenset(names)


def reconcile_category(raw_category: str | None, raw_subcategory: str | None, model: str) -> str:
    """
    Choose and normalize the category name an import row is filed under.

    Precedence: subcategory, then main category, then "<Display Name> Parts".
    Names that are not part of the model's tree pass through unchanged.
    """
    convention = get_convention(model)
    for raw in (raw_subcategory, raw_category):
        if raw is None or not str(raw).strip():
            continue
        name = reconcile_name(str(raw), model)
        if convention.complete_main_titles and name not in canonical_names(model):
            logger.debug(f"Category '{raw}' is not in the {convention.display_name} tree; kept as '{name}'")
        return name
    return convention.placeholder


def build_hierarchy(model: str) -> CategoryNode:
    """
    Build the canonical root -> mains -> subs tree for a model.

    Raises:
        ValueError: The model has no built-in tree (MODEL_S, MODEL_X).
    """
    convention = get_convention(model)
    if not has_builtin_tree(model):
        raise ValueError(f"No built-in category tree for {model}; supply a hierarchy")

    display = convention.display_name
    root = CategoryNode(name=display, description=f"Tesla {display} parts and components")
    for main in MAIN_CATEGORIES:
        main_node = CategoryNode(
            name=convention.canonical(f"{main.code} - {main.title}"),
            description=main.description.format(model=display),
        )
        for sub in main.subcategories:
            main_node.children.append(
                CategoryNode(name=convention.canonical(f"{sub.code} - {sub.title}"), description=sub.description)
            )
        root.children.append(main_node)
    return root
