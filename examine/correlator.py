"""Match captured step records back to the recovered source lines."""

from __future__ import annotations

import bisect
import pprint
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple

from . import units

if TYPE_CHECKING:
    from .session import CapturedStep

_MISSING = object()


@dataclass(frozen=True)
class AnnotatedLine:
    """One line of the report body: source text plus its captured result."""

    text: str
    value: Any = _MISSING
    duration_ns: Optional[int] = None

    @property
    def annotated(self) -> bool:
        return self.value is not _MISSING

    def render(self, time_unit: str, *, measure: bool = True, pretty: bool = False) -> str:
        if not self.annotated:
            return self.text
        rendered = render_value(self.value, pretty=pretty)
        if measure and self.duration_ns is not None:
            return f"{self.text} #=> [{units.format_duration(self.duration_ns, time_unit)}] {rendered}"
        return f"{self.text} #=> {rendered}"


def render_value(value: Any, *, pretty: bool = False) -> str:
    """Canonical text of ``value``; continuation lines line up with the body."""
    text = pprint.pformat(value) if pretty else repr(value)
    return text.replace("\n", "\n  ")


def step_durations(records: Mapping[int, CapturedStep]) -> dict[int, int]:
    """Turn cumulative elapsed times into per-step deltas, keyed by line.

    Each record loses the elapsed time of the closest record on a smaller
    line; the first record keeps its raw value.
    """
    durations: dict[int, int] = {}
    for line, record in records.items():
        previous = preceding_line(records, line)
        elapsed = record.elapsed_ns
        if previous is not None:
            elapsed -= records[previous].elapsed_ns
        durations[line] = elapsed
    return durations


def annotate(
    lines: Sequence[Tuple[str, int]],
    records: Mapping[int, CapturedStep],
) -> List[AnnotatedLine]:
    durations = step_durations(records)
    annotated: List[AnnotatedLine] = []
    for text, index in lines:
        record = records.get(index + 1)
        if record is None:
            annotated.append(AnnotatedLine(text))
        else:
            annotated.append(AnnotatedLine(text, record.value, durations[record.line]))
    return annotated


def correlate(
    lines: Sequence[Tuple[str, int]],
    records: Mapping[int, CapturedStep],
    time_unit: str = units.DEFAULT_UNIT,
    *,
    measure: bool = True,
    pretty: bool = False,
    total_ns: Optional[int] = None,
) -> List[str]:
    """Render ``lines`` with the results and durations found in ``records``.

    ``lines`` pairs each source text with its 0-based index in the file, so
    the record for a text lives under ``index + 1``. When more than one
    record exists a ``Total Duration`` footer is appended; ``total_ns``
    defaults to the largest elapsed time recorded.
    """
    rendered = [
        line.render(time_unit, measure=measure, pretty=pretty)
        for line in annotate(lines, records)
    ]
    if measure and len(records) > 1:
        if total_ns is None:
            total_ns = max(record.elapsed_ns for record in records.values())
        rendered.append("")
        rendered.append(f"  Total Duration: {units.format_duration(total_ns, time_unit)}")
    return rendered


def preceding_line(records: Mapping[int, CapturedStep], line: int) -> Optional[int]:
    """Return the greatest recorded line strictly below ``line``."""
    ordered = sorted(records)
    position = bisect.bisect_left(ordered, line)
    return ordered[position - 1] if position > 0 else None


__all__ = [
    "AnnotatedLine",
    "annotate",
    "correlate",
    "preceding_line",
    "render_value",
    "step_durations",
]
