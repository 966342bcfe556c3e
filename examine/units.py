"""Time units accepted by the ``time_unit`` option."""

from __future__ import annotations

SECOND: str = "second"
MILLISECOND: str = "millisecond"
MICROSECOND: str = "microsecond"
NANOSECOND: str = "nanosecond"
DEFAULT_UNIT: str = MILLISECOND

# nanoseconds per unit, and the suffix printed after a duration
_NS_PER_UNIT = {
    SECOND: 1_000_000_000,
    MILLISECOND: 1_000_000,
    MICROSECOND: 1_000,
    NANOSECOND: 1,
}
_SUFFIXES = {
    SECOND: "s",
    MILLISECOND: "ms",
    MICROSECOND: "μs",
    NANOSECOND: "ns",
}
_ALIASES = {
    "s": SECOND,
    "sec": SECOND,
    "seconds": SECOND,
    "ms": MILLISECOND,
    "milliseconds": MILLISECOND,
    "us": MICROSECOND,
    "μs": MICROSECOND,
    "microseconds": MICROSECOND,
    "ns": NANOSECOND,
    "nanoseconds": NANOSECOND,
}

SUPPORTED_UNITS = frozenset(_NS_PER_UNIT)


def normalize_unit(value: str) -> str:
    """Return the canonical spelling of ``value`` (case-insensitive, aliases resolved)."""
    lowered = value.strip().lower()
    return _ALIASES.get(lowered, lowered)


def is_supported(value: str) -> bool:
    return value in SUPPORTED_UNITS


def suffix(unit: str) -> str:
    return _SUFFIXES[unit]


def convert(nanoseconds: int, unit: str) -> float | int:
    """Convert a nanosecond count into ``unit``.

    Nanoseconds stay integral; every other unit yields a float.
    """
    if unit == NANOSECOND:
        return int(nanoseconds)
    return nanoseconds / _NS_PER_UNIT[unit]


def format_duration(nanoseconds: int, unit: str) -> str:
    """Render ``nanoseconds`` as ``<value><suffix>``, e.g. ``0.042ms``."""
    value = convert(nanoseconds, unit)
    if isinstance(value, int):
        return f"{value}{suffix(unit)}"
    return f"{value:.3f}{suffix(unit)}"


__all__ = [
    "SECOND",
    "MILLISECOND",
    "MICROSECOND",
    "NANOSECOND",
    "DEFAULT_UNIT",
    "SUPPORTED_UNITS",
    "normalize_unit",
    "is_supported",
    "suffix",
    "convert",
    "format_duration",
]
