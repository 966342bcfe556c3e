"""CLI to run a Python script with its ``examine.inspect`` call sites expanded.

Usage:
    python -m examine [examine options] <script.py> [script args...]

Examine options (must appear before the script path):
    --examine-env ENV              Profile to run under (default: $EXAMINE_ENV or dev)
    --examine-log-level LEVEL      Log level of the examine logger (e.g. DEBUG)
    --examine-log-file PATH        Also write examine logs to a file

Examples:
    python -m examine pipeline.py --flag=1
    python -m examine --examine-log-level=DEBUG pipeline.py
    python -m examine --examine-env=prod pipeline.py
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .api import run_path
from .config import Settings
from .logging_config import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m examine", add_help=True)
    parser.add_argument(
        "--examine-env",
        dest="env",
        default=None,
        help="Profile to run under. Call sites are expanded only when it is listed in EXAMINE_ENVIRONMENTS.",
    )
    parser.add_argument(
        "--examine-log-level",
        dest="log_level",
        default=None,
        help="Log level of the examine logger (e.g. DEBUG, INFO). Default: $EXAMINE_LOG_LEVEL or WARNING.",
    )
    parser.add_argument(
        "--examine-log-file",
        dest="log_file",
        default=None,
        help="Path to a file where examine logs should be written.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    # Only parse our options; leave script and script args in unknown
    ns, unknown = parser.parse_known_args(argv)

    if not unknown or not Path(unknown[0]).is_file():
        sys.stderr.write("Usage: python -m examine [examine options] <script.py> [args...]\n")
        return 2

    script_path = Path(unknown[0]).resolve()
    script_args = unknown[1:]

    settings = Settings.from_env()
    if ns.env:
        settings = settings.with_env(ns.env)
    configure_logging(ns.log_level or settings.log_level, ns.log_file)

    old_argv = sys.argv
    old_path = list(sys.path)
    sys.argv = [str(script_path)] + script_args
    sys.path.insert(0, str(script_path.parent))
    try:
        run_path(script_path, run_name="__main__", settings=settings)
        return 0
    except SystemExit as e:
        # Preserve script's exit code
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    finally:
        sys.argv = old_argv
        sys.path[:] = old_path


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
