"""Line bounds of an expression tree."""

from __future__ import annotations

import ast
from typing import Optional, Tuple

LineRange = Tuple[int, int]


def analyze(tree: ast.AST) -> Optional[LineRange]:
    """Return the ``(min_line, max_line)`` covered by ``tree``.

    Both ``lineno`` and ``end_lineno`` of every node are folded into the
    bounds; nodes without position metadata are ignored. Returns ``None``
    when no node in the tree carries a line number.
    """
    lines = [
        line
        for node in ast.walk(tree)
        for line in (getattr(node, "lineno", None), getattr(node, "end_lineno", None))
        if line is not None
    ]
    if not lines:
        return None
    return min(lines), max(lines)


__all__ = ["LineRange", "analyze"]
