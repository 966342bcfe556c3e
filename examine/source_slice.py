"""Recover the literal source text of a pipeline from the file it lives in.

Everything in here is a best-effort heuristic. Each guard is its own function
so it can be tested alone, and :func:`extract` returns ``None`` instead of
raising whenever the text cannot be recovered; callers then fall back to a
rendering of the expression tree.
"""
from __future__ import annotations

import ast
import logging
import os
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .line_range import LineRange, analyze

logger = logging.getLogger(__name__)

# leading token of a chained method call line
PIPE_MARKER: str = "."
INDENT: str = "  "

SourceSlice = List[Tuple[str, int]]


def extract(filename: str, call_line: int, tree: ast.AST) -> Optional[SourceSlice]:
    """Return ``[(text, index), ...]`` for the pipeline ``tree`` ending at ``call_line``.

    ``index`` is the 0-based position of the text in the file, so the 1-based
    line it shows is ``index + 1``. Returns ``None`` when any guard fails.
    """
    if not is_real_file(filename):
        logger.debug("no source slice: %r is not a file on disk", filename)
        return None

    line_range = analyze(tree)
    if line_range is None or not spans_multiple_lines(line_range):
        logger.debug("no source slice: expression range %r is a single line", line_range)
        return None
    min_line, max_line = line_range

    if not precedes_call(line_range, call_line):
        logger.debug(
            "no source slice: expression ends on line %d after call line %d",
            max_line,
            call_line,
        )
        return None

    lines = read_lines(filename)
    if lines is None:
        return None
    if not continues_pipeline(lines, call_line):
        logger.debug("no source slice: line %d of %s is not a chained call", call_line, filename)
        return None

    end = adjust_end(max_line, call_line)
    start = slice_start(lines, min_line)
    selected = lines[start:end]
    if not selected:
        return None
    return list(zip(adjust_indent(selected), range(start, start + len(selected))))


def is_real_file(filename: str) -> bool:
    """Reject pseudo file names such as ``<stdin>`` or ``<string>``."""
    if not filename or (filename.startswith("<") and filename.endswith(">")):
        return False
    return os.path.isfile(filename)


def spans_multiple_lines(line_range: Optional[LineRange]) -> bool:
    return line_range is not None and line_range[0] < line_range[1]


def precedes_call(line_range: LineRange, call_line: int) -> bool:
    return line_range[1] <= call_line


def read_lines(filename: str) -> Optional[List[str]]:
    try:
        return Path(filename).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("no source slice: unable to read %s: %s", filename, exc)
        return None


def continues_pipeline(lines: Sequence[str], call_line: int) -> bool:
    """The call must be written as a link of the chain, not as a bare call."""
    if call_line < 1 or call_line > len(lines):
        return False
    return lines[call_line - 1].strip().startswith(PIPE_MARKER)


def adjust_end(max_line: int, call_line: int) -> int:
    """Return the exclusive 0-based end of the slice.

    A trailing line that carries no position metadata (a closing bracket of
    a multi-line argument) leaves a one-line gap before the call, so the
    slice is stretched up to the call. When the call shares the last line of
    the expression, that line is left out.
    """
    if call_line - max_line == 2:
        max_line = call_line - 1
    if max_line == call_line:
        max_line -= 1
    return max_line


def slice_start(lines: Sequence[str], min_line: int) -> int:
    """Return the 0-based first line of the slice.

    When the first line of the tree is already a chained call, the value the
    chain starts from sits on the line above it.
    """
    if lines[min_line - 1].strip().startswith(PIPE_MARKER):
        return max(min_line - 2, 0)
    return min_line - 1


def adjust_indent(lines: Sequence[str]) -> List[str]:
    """Strip the common indentation and re-indent by :data:`INDENT`."""
    dedented = textwrap.dedent("\n".join(lines)).split("\n")
    return [f"{INDENT}{line}" if line.strip() else "" for line in dedented]


__all__ = [
    "INDENT",
    "PIPE_MARKER",
    "SourceSlice",
    "adjust_end",
    "adjust_indent",
    "continues_pipeline",
    "extract",
    "is_real_file",
    "precedes_call",
    "read_lines",
    "slice_start",
    "spans_multiple_lines",
]
