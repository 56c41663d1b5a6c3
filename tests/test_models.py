"""Tests for coveralls_report/models.py"""

import hashlib

import pytest

from coveralls_report.models import (
    CoverallsReport,
    GitInfo,
    Head,
    RepoToken,
    ServiceToken,
    SourceFile,
    SourceFileError,
)


@pytest.fixture
def source(tmp_path):
    p = tmp_path / "lib.py"
    p.write_text("a = 1\nb = 2\n\nc = 3\n", encoding="utf-8")
    return p


# ---------------------------------------------------------------------------
# SourceFile
# ---------------------------------------------------------------------------

def test_source_file_digest_is_md5_of_contents(source):
    entry = SourceFile.from_path("lib.py", str(source), {1: 1})
    assert entry.source_digest == hashlib.md5(source.read_bytes()).hexdigest()


def test_coverage_array_has_slot_per_line(source):
    entry = SourceFile.from_path("lib.py", str(source), {1: 3, 4: 0})
    assert entry.coverage_array() == [3, None, None, 0]


def test_coverage_array_extends_past_last_line(source):
    entry = SourceFile.from_path("lib.py", str(source), {6: 1})
    assert entry.coverage_array() == [None, None, None, None, None, 1]


def test_empty_coverage_still_builds(source):
    entry = SourceFile.from_path("lib.py", str(source), {})
    assert entry.coverage == {}
    assert entry.to_dict()["coverage"] == [None, None, None, None]


def test_missing_file_raises(tmp_path):
    with pytest.raises(SourceFileError, match="Cannot read"):
        SourceFile.from_path("gone.py", str(tmp_path / "gone.py"), {1: 1})


def test_undecodable_file_raises(tmp_path):
    p = tmp_path / "bin.py"
    p.write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(SourceFileError):
        SourceFile.from_path("bin.py", str(p), {})


# ---------------------------------------------------------------------------
# CoverallsReport.to_dict()
# ---------------------------------------------------------------------------

def test_repo_token_payload():
    data = CoverallsReport(RepoToken("tok")).to_dict()
    assert data == {"repo_token": "tok", "source_files": []}


def test_service_token_payload():
    data = CoverallsReport(ServiceToken("travis-ci", "1234")).to_dict()
    assert data["service_name"] == "travis-ci"
    assert data["service_job_id"] == "1234"
    assert "repo_token" not in data


def test_git_section_only_when_present():
    report = CoverallsReport(RepoToken("tok"))
    assert "git" not in report.to_dict()

    report.git = GitInfo(head=Head(id="abc"), branch="main")
    git = report.to_dict()["git"]
    assert git["branch"] == "main"
    assert git["head"]["id"] == "abc"
    assert git["head"]["message"] == ""


def test_source_files_serialized(source):
    report = CoverallsReport(RepoToken("tok"))
    report.add_source(SourceFile.from_path("lib.py", str(source), {2: 5}))
    files = report.to_dict()["source_files"]
    assert len(files) == 1
    assert files[0]["name"] == "lib.py"
    assert files[0]["coverage"] == [None, 5, None, None]
