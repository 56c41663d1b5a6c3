"""Coverage trace data.

A ``TraceMap`` holds, for each traced source file, the statistics gathered for
its lines. Three statistic kinds exist:

    LineHits       - number of times the line was executed
    BranchStat     - whether a two-way branch was taken each way
    ConditionStat  - the same, for every operand of a compound condition

Usage:
    traces = load("coverage-traces.json")    # raises TraceFileError on bad input
    for path in traces.files():
        for trace in traces.get_child_traces(path):
            ...
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


class TraceFileError(Exception):
    """Raised when a trace file is missing or malformed."""


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineHits:
    hits: int

    def __post_init__(self) -> None:
        if self.hits < 0:
            raise ValueError(f"Hit count must be non-negative, got {self.hits}")


@dataclass(frozen=True)
class LogicState:
    been_true: bool = False
    been_false: bool = False


@dataclass(frozen=True)
class BranchStat:
    been_true: bool = False
    been_false: bool = False


@dataclass(frozen=True)
class ConditionStat:
    states: tuple[LogicState, ...] = ()


CoverageStat = Union[LineHits, BranchStat, ConditionStat]


@dataclass(frozen=True)
class Trace:
    line: int
    stats: CoverageStat

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError(f"Line numbers start at 1, got {self.line}")


# ---------------------------------------------------------------------------
# TraceMap
# ---------------------------------------------------------------------------

@dataclass
class TraceMap:
    traces: dict[str, list[Trace]] = field(default_factory=dict)

    def add_trace(self, path: str, trace: Trace) -> None:
        self.traces.setdefault(path, []).append(trace)

    def add_file(self, path: str) -> None:
        """Register *path* even if it has no coverable lines."""
        self.traces.setdefault(path, [])

    def files(self) -> list[str]:
        return sorted(self.traces)

    def get_child_traces(self, path: str) -> list[Trace]:
        return list(self.traces.get(path, []))

    def coverable_lines(self) -> int:
        return sum(
            1 for traces in self.traces.values()
            for t in traces if isinstance(t.stats, LineHits)
        )

    def covered_lines(self) -> int:
        return sum(
            1 for traces in self.traces.values()
            for t in traces if isinstance(t.stats, LineHits) and t.stats.hits > 0
        )

    def coverage_percentage(self) -> float:
        """Share of coverable lines hit at least once, 0-100.

        An empty map reports 0.0 rather than dividing by zero.
        """
        coverable = self.coverable_lines()
        if not coverable:
            return 0.0
        return 100.0 * self.covered_lines() / coverable


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(trace_path: str) -> TraceMap:
    """Load a JSON trace file.

    Expected shape::

        {"files": {"/abs/src/foo.py": [
            {"line": 1, "hits": 3},
            {"line": 4, "branch": {"true": true, "false": false}},
            {"line": 9, "condition": [{"true": true, "false": true}]}
        ]}}

    Raises:
        TraceFileError: if the file is missing, is not valid JSON or does not
                        match the expected shape.
    """
    path = Path(trace_path)
    if not path.exists():
        raise TraceFileError(f"Trace file not found: '{trace_path}'")

    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TraceFileError(f"Failed to parse '{trace_path}': {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("files"), dict):
        raise TraceFileError(f"'{trace_path}' must contain a 'files' mapping.")

    trace_map = TraceMap()
    for source, entries in raw["files"].items():
        if not isinstance(entries, list):
            raise TraceFileError(f"Traces for '{source}' must be a list.")
        trace_map.add_file(source)
        for entry in entries:
            try:
                trace_map.add_trace(source, _parse_trace(entry))
            except (KeyError, TypeError, ValueError) as exc:
                raise TraceFileError(
                    f"Invalid trace for '{source}': {entry!r} ({exc})"
                ) from exc
    return trace_map


def _parse_trace(entry: dict) -> Trace:
    line = int(entry["line"])
    if "hits" in entry:
        return Trace(line, LineHits(int(entry["hits"])))
    if "branch" in entry:
        return Trace(line, BranchStat(*_parse_logic(entry["branch"])))
    if "condition" in entry:
        states = tuple(LogicState(*_parse_logic(s)) for s in entry["condition"])
        return Trace(line, ConditionStat(states))
    raise ValueError("expected one of 'hits', 'branch' or 'condition'")


def _parse_logic(raw: dict) -> tuple[bool, bool]:
    if not isinstance(raw, dict):
        raise TypeError(f"expected a mapping of 'true'/'false', got {raw!r}")
    return bool(raw.get("true", False)), bool(raw.get("false", False))
