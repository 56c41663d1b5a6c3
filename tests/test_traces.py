"""Tests for coveralls_report/traces.py"""

import json

import pytest

from coveralls_report.traces import (
    BranchStat,
    ConditionStat,
    LineHits,
    LogicState,
    Trace,
    TraceFileError,
    TraceMap,
    load,
)


def write_traces(tmp_path, content) -> str:
    p = tmp_path / "traces.json"
    p.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
    return str(p)


# ---------------------------------------------------------------------------
# TraceMap
# ---------------------------------------------------------------------------

def test_files_are_sorted():
    tm = TraceMap()
    tm.add_trace("/src/b.py", Trace(1, LineHits(1)))
    tm.add_trace("/src/a.py", Trace(1, LineHits(1)))
    assert tm.files() == ["/src/a.py", "/src/b.py"]


def test_get_child_traces_unknown_file_is_empty():
    assert TraceMap().get_child_traces("/nope.py") == []


def test_summary_counts_only_line_hits():
    tm = TraceMap()
    tm.add_trace("/a.py", Trace(1, LineHits(2)))
    tm.add_trace("/a.py", Trace(2, LineHits(0)))
    tm.add_trace("/a.py", Trace(3, BranchStat(True, False)))
    assert tm.coverable_lines() == 2
    assert tm.covered_lines() == 1
    assert tm.coverage_percentage() == 50.0


def test_empty_map_has_zero_percent():
    assert TraceMap().coverage_percentage() == 0.0


def test_negative_hits_rejected():
    with pytest.raises(ValueError):
        LineHits(-1)


def test_line_zero_rejected():
    with pytest.raises(ValueError):
        Trace(0, LineHits(1))


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------

def test_load_all_statistic_kinds(tmp_path):
    path = write_traces(tmp_path, {"files": {"/src/a.py": [
        {"line": 1, "hits": 3},
        {"line": 4, "branch": {"true": True, "false": False}},
        {"line": 9, "condition": [{"true": True, "false": True}, {}]},
    ]}})
    tm = load(path)
    traces = tm.get_child_traces("/src/a.py")
    assert traces[0] == Trace(1, LineHits(3))
    assert traces[1] == Trace(4, BranchStat(True, False))
    assert traces[2] == Trace(9, ConditionStat((LogicState(True, True), LogicState())))


def test_load_keeps_files_without_traces(tmp_path):
    tm = load(write_traces(tmp_path, {"files": {"/src/empty.py": []}}))
    assert tm.files() == ["/src/empty.py"]


def test_load_missing_file(tmp_path):
    with pytest.raises(TraceFileError, match="not found"):
        load(str(tmp_path / "nope.json"))


def test_load_invalid_json(tmp_path):
    with pytest.raises(TraceFileError, match="Failed to parse"):
        load(write_traces(tmp_path, "{not json"))


def test_load_requires_files_mapping(tmp_path):
    with pytest.raises(TraceFileError, match="'files'"):
        load(write_traces(tmp_path, {"traces": []}))


def test_load_rejects_negative_hits(tmp_path):
    with pytest.raises(TraceFileError, match="Invalid trace"):
        load(write_traces(tmp_path, {"files": {"/a.py": [{"line": 1, "hits": -2}]}}))


def test_load_rejects_unknown_statistic(tmp_path):
    with pytest.raises(TraceFileError, match="Invalid trace"):
        load(write_traces(tmp_path, {"files": {"/a.py": [{"line": 1}]}}))


def test_load_rejects_branch_given_as_list(tmp_path):
    path = write_traces(tmp_path, {"files": {"/a.py": [{"line": 1, "branch": [True, False]}]}})
    with pytest.raises(TraceFileError, match="Invalid trace"):
        load(path)


def test_load_rejects_non_mapping_condition_state(tmp_path):
    path = write_traces(tmp_path, {"files": {"/a.py": [{"line": 1, "condition": [True]}]}})
    with pytest.raises(TraceFileError, match="Invalid trace"):
        load(path)


def test_load_rejects_invalid_utf8(tmp_path):
    p = tmp_path / "traces.json"
    p.write_bytes(b'{"files": {"\xff": []}}')
    with pytest.raises(TraceFileError, match="Failed to parse"):
        load(str(p))
