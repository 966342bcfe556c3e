"""Process-wide settings and per-call options.

Settings come from ``EXAMINE_*`` environment variables and decide whether
call sites are instrumented at all (the environment gate) plus the default
header colors and time unit. Options are the keyword arguments written at a
call site; they are validated while the module is transformed.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from rich.color import ANSI_COLOR_NAMES

from . import units
from .errors import ExamineConfigError

DEFAULT_ENV: str = "dev"
DEFAULT_ENVIRONMENTS: tuple[str, ...] = ("dev",)
DEFAULT_COLOR: str = "white"
DEFAULT_BG_COLOR: str = "cyan"
DEFAULT_LOG_LEVEL: str = "WARNING"

OPTION_NAMES = frozenset(
    {
        "show_vars",
        "label",
        "color",
        "bg_color",
        "time_unit",
        "inspect_pipeline",
        "measure",
        "pretty",
    }
)
# options that may be arbitrary expressions evaluated at run time
RUNTIME_OPTIONS = frozenset({"label"})
_BOOL_OPTIONS = ("show_vars", "inspect_pipeline", "measure", "pretty")


@dataclass(frozen=True)
class Settings:
    """Environment-derived configuration shared by every call site."""

    env: str = DEFAULT_ENV
    environments: tuple[str, ...] = DEFAULT_ENVIRONMENTS
    color: str = DEFAULT_COLOR
    bg_color: str = DEFAULT_BG_COLOR
    time_unit: str = units.DEFAULT_UNIT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _coerce_color(self.color, "color"))
        object.__setattr__(self, "bg_color", _coerce_color(self.bg_color, "bg_color"))
        object.__setattr__(self, "time_unit", _coerce_unit(self.time_unit))

    @property
    def enabled(self) -> bool:
        """Return ``True`` when the current profile has instrumentation active."""
        return self.env in self.environments

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_envs = env.get("EXAMINE_ENVIRONMENTS")
        environments = (
            tuple(part.strip() for part in raw_envs.split(",") if part.strip())
            if raw_envs is not None
            else DEFAULT_ENVIRONMENTS
        )
        return cls(
            env=env.get("EXAMINE_ENV", DEFAULT_ENV).strip() or DEFAULT_ENV,
            environments=environments,
            color=env.get("EXAMINE_COLOR", DEFAULT_COLOR),
            bg_color=env.get("EXAMINE_BG_COLOR", DEFAULT_BG_COLOR),
            time_unit=env.get("EXAMINE_TIME_UNIT", units.DEFAULT_UNIT),
            log_level=env.get("EXAMINE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )

    def with_env(self, env: str) -> "Settings":
        return replace(self, env=env)


@dataclass(frozen=True)
class Options:
    """Validated options of a single ``inspect`` call site."""

    show_vars: bool = False
    label: Optional[str] = None
    color: str = DEFAULT_COLOR
    bg_color: str = DEFAULT_BG_COLOR
    time_unit: str = units.DEFAULT_UNIT
    inspect_pipeline: bool = False
    measure: bool = True
    pretty: bool = False

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, Any],
        settings: Optional[Settings] = None,
    ) -> "Options":
        """Build options from call-site keywords, filling gaps from ``settings``.

        Raises
        ------
        ExamineConfigError
            For unknown option names, non-boolean flags, unsupported colors
            or unsupported time units.
        """
        settings = settings or Settings()
        unknown = sorted(set(values) - OPTION_NAMES)
        if unknown:
            supported = ", ".join(sorted(OPTION_NAMES))
            raise ExamineConfigError(
                f"unknown option(s) {', '.join(unknown)}. Expected any of: {supported}"
            )
        for name in _BOOL_OPTIONS:
            if name in values and not isinstance(values[name], bool):
                raise ExamineConfigError(
                    f"option '{name}' expects a bool, got {values[name]!r}"
                )

        label = values.get("label")
        return cls(
            show_vars=values.get("show_vars", False),
            label=None if label is None else str(label),
            color=_coerce_color(values.get("color", settings.color), "color"),
            bg_color=_coerce_color(values.get("bg_color", settings.bg_color), "bg_color"),
            time_unit=_coerce_unit(values.get("time_unit", settings.time_unit)),
            inspect_pipeline=values.get("inspect_pipeline", False),
            measure=values.get("measure", True),
            pretty=values.get("pretty", False),
        )

    def as_mapping(self) -> dict[str, Any]:
        """Return the options as plain keyword values."""
        return {
            "show_vars": self.show_vars,
            "label": self.label,
            "color": self.color,
            "bg_color": self.bg_color,
            "time_unit": self.time_unit,
            "inspect_pipeline": self.inspect_pipeline,
            "measure": self.measure,
            "pretty": self.pretty,
        }


def _coerce_color(value: Any, option: str) -> str:
    if not isinstance(value, str) or value.strip().lower() not in ANSI_COLOR_NAMES:
        raise ExamineConfigError(
            f"expected a named terminal color for '{option}', got {value!r}"
        )
    return value.strip().lower()


def _coerce_unit(value: Any) -> str:
    if not isinstance(value, str):
        raise ExamineConfigError(f"expected a time unit name, got {value!r}")
    normalized = units.normalize_unit(value)
    if not units.is_supported(normalized):
        supported = ", ".join(sorted(units.SUPPORTED_UNITS))
        raise ExamineConfigError(
            f"unsupported time unit '{value}'. Expected one of: {supported}"
        )
    return normalized


__all__ = [
    "DEFAULT_BG_COLOR",
    "DEFAULT_COLOR",
    "DEFAULT_ENV",
    "DEFAULT_ENVIRONMENTS",
    "OPTION_NAMES",
    "RUNTIME_OPTIONS",
    "Options",
    "Settings",
]
