"""Assemble and print the report of one invocation on ``sys.stderr``."""

from __future__ import annotations

import os
import types
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from rich.console import Console
from rich.text import Text

from .correlator import AnnotatedLine, correlate, render_value
from .source_slice import INDENT

if TYPE_CHECKING:
    from .session import Invocation

# prefix of the hidden locals that hold an Invocation
CONTEXT_PREFIX: str = "__examine_"

_HIDDEN_TYPES = (types.FunctionType, types.BuiltinFunctionType, types.ModuleType, type)


def make_console() -> Console:
    # markup stays off so "[0.1ms]" is printed verbatim
    return Console(stderr=True, highlight=False, markup=False, emoji=False, soft_wrap=True)


def short_file_name(filename: str) -> str:
    """Show ``filename`` relative to the working directory when it lives below it."""
    if filename.startswith("<"):
        return filename
    try:
        relative = Path(filename).resolve().relative_to(Path.cwd().resolve())
    except (OSError, ValueError):
        return filename
    return f".{os.sep}{relative}"


def header_text(filename: str, line: int) -> str:
    return f"{short_file_name(filename)}:{line}"


def visible_bindings(bindings: Mapping[str, Any]) -> List[tuple[str, Any]]:
    """Return the user-facing name/value pairs of a ``locals()`` snapshot."""
    visible = []
    for name, value in bindings.items():
        if name.startswith("__") or name.startswith(CONTEXT_PREFIX):
            continue
        if isinstance(value, _HIDDEN_TYPES):
            continue
        visible.append((name, value))
    return visible


def render_vars(bindings: Mapping[str, Any], *, pretty: bool = False) -> List[str]:
    return [
        f"{INDENT}{name} = {render_value(value, pretty=pretty)}"
        for name, value in visible_bindings(bindings)
    ]


def render_body(invocation: "Invocation", value: Any) -> List[str]:
    """Return the body lines: the correlated pipeline or the rendered expression."""
    site = invocation.site
    options = invocation.options
    if site.source is not None:
        lines = list(site.source)
        outer_index = site.step_line - 1
        if site.tail is not None and all(index != outer_index for _, index in lines):
            # the last step shares its line with the call
            lines.append((f"{INDENT}{site.tail}", outer_index))
        return correlate(
            lines,
            invocation.records,
            options.time_unit,
            measure=options.measure,
            pretty=options.pretty,
            total_ns=invocation.total_ns,
        )

    lines = [f"{INDENT}{line}" for line in site.rendered.splitlines()] or [INDENT]
    last = AnnotatedLine(lines[-1], value, invocation.total_ns)
    lines[-1] = last.render(options.time_unit, measure=options.measure, pretty=options.pretty)
    return lines


def emit(
    invocation: "Invocation",
    value: Any,
    bindings: Optional[Mapping[str, Any]] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or make_console()
    options = invocation.options
    site = invocation.site

    if options.label is not None:
        console.print(Text(options.label))
        console.print()
    console.print(
        Text(
            header_text(site.filename, site.line),
            style=f"bold {options.color} on {options.bg_color}",
        )
    )
    if options.show_vars and bindings is not None:
        for line in render_vars(bindings, pretty=options.pretty):
            console.print(Text(line))
    console.print()
    for line in render_body(invocation, value):
        console.print(Text(line))


__all__ = [
    "CONTEXT_PREFIX",
    "emit",
    "header_text",
    "make_console",
    "render_body",
    "render_vars",
    "short_file_name",
    "visible_bindings",
]
