"""Coverage export to Coveralls.

Functions:
    build_source_files(dataset, config)            -> Iterator[SourceFile]
    build_report(dataset, config, environ=None)    -> CoverallsReport
    export(dataset, config, *, client=None, environ=None) -> None

``export`` sends exactly one request per call. Statistics Coveralls cannot
represent are logged and dropped, as are files whose entry cannot be built;
only a missing key or a failed submission aborts the export.
"""

import logging
from collections.abc import Iterator, Mapping

from coveralls_report.ci import resolve_git_info
from coveralls_report.client import DEFAULT_ENDPOINT, CoverallsClient, CoverallsClientError
from coveralls_report.config import Config
from coveralls_report.errors import MissingCredentialError, SubmissionError
from coveralls_report.models import (
    CoverallsReport,
    Identity,
    RepoToken,
    ServiceToken,
    SourceFile,
    SourceFileError,
)
from coveralls_report.traces import LineHits, TraceMap

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Report building
# ---------------------------------------------------------------------------

def _identity(config: Config) -> Identity:
    if not config.coveralls:
        raise MissingCredentialError("No coveralls key specified.")
    if config.ci_tool:
        return ServiceToken(service_name=config.ci_tool, service_job_id=config.coveralls)
    return RepoToken(config.coveralls)


def _line_hits(dataset: TraceMap, path: str) -> dict[int, int]:
    lines: dict[int, int] = {}
    for trace in dataset.get_child_traces(path):
        if isinstance(trace.stats, LineHits):
            lines[trace.line] = trace.stats.hits
        else:
            logger.info(
                "Support for coverage statistic %s not implemented or supported for coveralls.io",
                type(trace.stats).__name__,
            )
    return lines


def build_source_files(dataset: TraceMap, config: Config) -> Iterator[SourceFile]:
    """Yield one entry per traced file, skipping files that cannot be read."""
    for path in dataset.files():
        name = config.strip_project_path(path)
        try:
            yield SourceFile.from_path(name, path, _line_hits(dataset, path))
        except SourceFileError as exc:
            logger.debug("Leaving %s out of the report: %s", name, exc)


def build_report(
    dataset: TraceMap,
    config: Config,
    environ: Mapping[str, str] | None = None,
) -> CoverallsReport:
    """Assemble the report without sending it.

    Raises:
        MissingCredentialError: no coveralls key in *config*.
    """
    report = CoverallsReport(_identity(config))

    git = resolve_git_info(environ)
    if git is not None:
        report.git = git

    for source in build_source_files(dataset, config):
        report.add_source(source)
    return report


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

def export(
    dataset: TraceMap,
    config: Config,
    *,
    client: CoverallsClient | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Build the report for *dataset* and send it to Coveralls.

    The report goes to ``config.report_uri`` when set, otherwise to
    coveralls.io.

    Raises:
        MissingCredentialError: no coveralls key; nothing is sent.
        SubmissionError:        the request failed or was rejected.
    """
    report = build_report(dataset, config, environ)
    client = client or CoverallsClient()

    if config.report_uri:
        logger.info("Sending report to endpoint: %s", config.report_uri)
        url = config.report_uri
    else:
        logger.info("Sending coverage data to coveralls.io")
        url = DEFAULT_ENDPOINT

    try:
        result = client.send(report, url)
    except CoverallsClientError as exc:
        raise SubmissionError(f"Coveralls send failed. {exc}") from exc

    if isinstance(result, dict) and result.get("url"):
        logger.info("Coverage job: %s", result["url"])
