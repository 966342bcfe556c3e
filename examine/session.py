"""Run-time side of an instrumented call site.

Transformed code creates one :class:`Invocation` per evaluation of an
``inspect`` call site and binds it to a hidden local name in the caller's
frame. Capture calls inserted by :mod:`examine.rewriter` record into it, and
:meth:`Invocation.finish` prints the report and hands the value back.
Nothing here is global, so recursion, threads and nested call sites each get
their own records.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from . import report
from .config import Options


@dataclass(frozen=True)
class Site:
    """Facts about a call site fixed when the module is transformed.

    ``source`` holds the recovered ``(text, index)`` pairs of the pipeline or
    ``None`` when only the synthesized ``rendered`` text is available.
    ``step_line`` is the line of the outermost step of the expression and
    ``tail`` the text of that step, shown when the step shares its line with
    the call and is therefore missing from ``source``.
    """

    filename: str
    line: int
    source: Optional[Tuple[Tuple[str, int], ...]]
    rendered: str
    step_line: int
    tail: Optional[str] = None


@dataclass(frozen=True)
class CapturedStep:
    """Value of one pipeline step and the time elapsed when it completed."""

    line: int
    value: Any
    elapsed_ns: int


class Invocation:
    """Side-channel of a single evaluation of an instrumented expression."""

    site: Site
    options: Options

    def __init__(self, site: Site, options: Mapping[str, Any]) -> None:
        self.site = site
        self.options = Options.from_mapping(options)
        self.records: Dict[int, CapturedStep] = {}
        self.total_ns: Optional[int] = None
        self.started = time.perf_counter_ns()

    def mark(self) -> int:
        """Return a start timestamp for a capture."""
        return time.perf_counter_ns()

    def capture(self, started: int, line: int, value: Any) -> Any:
        """Record ``value`` for the step on ``line`` and return it unchanged."""
        self.records[line] = CapturedStep(line, value, time.perf_counter_ns() - started)
        return value

    def finish(self, value: Any, bindings: Optional[Mapping[str, Any]] = None) -> Any:
        """Record the outermost step, print the report and return ``value``."""
        self.total_ns = time.perf_counter_ns() - self.started
        line = self.site.step_line
        self.records[line] = CapturedStep(line, value, self.total_ns)
        report.emit(self, value, bindings)
        return value


__all__ = (
    "CapturedStep",
    "Invocation",
    "Site",
)
