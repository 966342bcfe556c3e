"""Public entry points of ``examine``.

``inspect`` is meant to be expanded by the source transform (see
:mod:`examine.transform`); modules run through :func:`run_path` or
``python -m examine`` get per-step captures and durations. Called as a plain
function it still reports the value it receives, using the text of the
calling line, and returns that value unchanged.
"""
from __future__ import annotations

import linecache
import logging
import os
import sys
import tokenize
import types
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .config import Options, Settings
from .session import Invocation, Site
from .transform import compile_source, transform_source

logger = logging.getLogger(__name__)


def inspect(value: Any, /, **options: Any) -> Any:
    """Report ``value`` on stderr and return it.

    Options
    -------
    show_vars:
        Print the local bindings of the caller above the report body.
    label:
        Text printed above the ``file:line`` header.
    color, bg_color:
        Named terminal colors of the header (defaults: ``white`` on ``cyan``).
    time_unit:
        ``second``, ``millisecond`` (default), ``microsecond`` or ``nanosecond``.
    inspect_pipeline:
        Capture the result of every step of a method chain. Only effective
        in transformed code.
    measure:
        Show durations (default ``True``). Only effective in transformed code.
    pretty:
        Render values with :func:`pprint.pformat` instead of :func:`repr`.

    Raises
    ------
    ExamineConfigError
        When an option is unknown or carries an unsupported value.
    """
    settings = Settings.from_env()
    if not settings.enabled:
        return value
    resolved = Options.from_mapping(options, settings)

    frame = sys._getframe(1)
    try:
        filename = frame.f_code.co_filename
        line = frame.f_lineno
        bindings = dict(frame.f_locals) if resolved.show_vars else None
    finally:
        del frame

    logger.debug("%s:%d: inspect called without the source transform", filename, line)
    text = linecache.getline(filename, line).strip() or "<unknown>"
    site = Site(filename, line, None, text, line)
    # the value is already computed here, so there is nothing to time
    invocation = Invocation(site, {**resolved.as_mapping(), "measure": False})
    return invocation.finish(value, bindings)


def is_enabled(settings: Optional[Settings] = None) -> bool:
    """Return ``True`` when the current profile has instrumentation active."""
    return (settings or Settings.from_env()).enabled


def run_path(
    path: os.PathLike | str,
    run_name: str = "__main__",
    *,
    settings: Optional[Settings] = None,
    init_globals: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Run a script with its ``inspect`` call sites expanded.

    Mirrors :func:`runpy.run_path` for plain source files: the module is
    registered in ``sys.modules`` under ``run_name`` while it executes and
    its resulting globals are returned.

    Raises
    ------
    FileNotFoundError
        When ``path`` does not exist.
    ExamineConfigError
        When a call site carries invalid options.
    """
    script = Path(path).expanduser().resolve()
    with tokenize.open(script) as handle:
        source = handle.read()
    code = compile_source(source, str(script), settings=settings)

    module = types.ModuleType(run_name)
    if init_globals:
        module.__dict__.update(init_globals)
    module.__dict__.update(__file__=str(script), __cached__=None, __loader__=None)

    saved = sys.modules.get(run_name)
    sys.modules[run_name] = module
    try:
        exec(code, module.__dict__)
    finally:
        if saved is None:
            sys.modules.pop(run_name, None)
        else:
            sys.modules[run_name] = saved
    return dict(module.__dict__)


__all__ = [
    "compile_source",
    "inspect",
    "is_enabled",
    "run_path",
    "transform_source",
]
