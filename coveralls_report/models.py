"""Data models for Coveralls reports.

Contains dataclasses used to structure and serialize the JSON payload:
    - RepoToken / ServiceToken   (Identity)
    - Head, GitInfo              (commit metadata)
    - SourceFile                 (per-file line coverage)
    - CoverallsReport
"""

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union


class SourceFileError(Exception):
    """Raised when a source entry cannot be built from the file on disk."""


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RepoToken:
    token: str

    def to_dict(self) -> dict:
        return {"repo_token": self.token}


@dataclass(frozen=True)
class ServiceToken:
    service_name: str
    service_job_id: str

    def to_dict(self) -> dict:
        return {
            "service_name": self.service_name,
            "service_job_id": self.service_job_id,
        }


Identity = Union[RepoToken, ServiceToken]


# ---------------------------------------------------------------------------
# Git metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Head:
    id: str = ""
    author_name: str = ""
    author_email: str = ""
    committer_name: str = ""
    committer_email: str = ""
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "committer_name": self.committer_name,
            "committer_email": self.committer_email,
            "message": self.message,
        }


@dataclass(frozen=True)
class GitInfo:
    head: Head
    branch: str = ""
    remotes: tuple = ()

    def to_dict(self) -> dict:
        return {
            "head": self.head.to_dict(),
            "branch": self.branch,
            "remotes": list(self.remotes),
        }


# ---------------------------------------------------------------------------
# Source files
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFile:
    name: str
    source_path: str
    coverage: dict[int, int]
    source_digest: str
    line_count: int

    @classmethod
    def from_path(cls, name: str, source_path: str, coverage: dict[int, int]) -> "SourceFile":
        """Build an entry for *source_path*, reading it to compute its digest.

        Raises:
            SourceFileError: the file cannot be read or is not valid UTF-8.
        """
        try:
            raw = Path(source_path).read_bytes()
            text = raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceFileError(f"Cannot read '{source_path}': {exc}") from exc

        return cls(
            name=name,
            source_path=source_path,
            coverage=dict(coverage),
            source_digest=hashlib.md5(raw).hexdigest(),
            line_count=len(text.splitlines()),
        )

    def coverage_array(self) -> list[int | None]:
        """Hits per line, ``None`` for lines that were never coverable.

        The array covers every line of the file and stretches further if a
        trace points past the last line.
        """
        length = max([self.line_count, *self.coverage])
        return [self.coverage.get(line) for line in range(1, length + 1)]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "source_digest": self.source_digest,
            "coverage": self.coverage_array(),
        }


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class CoverallsReport:
    identity: Identity
    git: GitInfo | None = None
    source_files: list[SourceFile] = field(default_factory=list)

    def add_source(self, source: SourceFile) -> None:
        self.source_files.append(source)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.identity.to_dict())
        if self.git is not None:
            data["git"] = self.git.to_dict()
        data["source_files"] = [s.to_dict() for s in self.source_files]
        return data
