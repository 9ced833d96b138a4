"""URL slug helper shared by products and categories."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    Lower-case, collapse runs of non-alphanumerics to "-", trim hyphens.

    Examples:
        "Model Y - 10 - BODY" -> "model-y-10-body"
        "Front Bumper (Upper)" -> "front-bumper-upper"
    """
    return _NON_ALNUM.sub("-", (value or "").lower()).strip("-")
