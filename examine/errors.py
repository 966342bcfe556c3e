"""Exception types raised by ``examine``."""

from __future__ import annotations


class ExamineError(Exception):
    """Base class for errors raised by the instrumentation layer."""


class ExamineConfigError(ExamineError, ValueError):
    """Raised when call-site options or environment settings are invalid.

    Call-site options are checked while the module is transformed, so the
    error surfaces before any instrumented code runs.
    """


__all__ = [
    "ExamineError",
    "ExamineConfigError",
]
