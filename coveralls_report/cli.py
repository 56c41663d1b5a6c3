"""CLI entry point — command definitions using Click.

Commands:
    init      Generate a template config file
    preview   Build the report and print it as JSON without sending it
    send      Build the report and submit it to Coveralls
"""

import json
import logging
import sys
from typing import Any

import click

from coveralls_report import __version__

LOG_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_inputs(ctx: click.Context, trace_path: str):
    """Load config and traces, applying command-line overrides. Exits on error."""
    from coveralls_report.config import ConfigError, load, validate
    from coveralls_report.traces import TraceFileError
    from coveralls_report.traces import load as load_traces

    obj = ctx.obj
    try:
        config = load(obj["config_path"], check=False)
        if obj["root"]:
            config.root = obj["root"]
        if obj["endpoint"]:
            config.report_uri = obj["endpoint"]
        if obj["ci_tool"]:
            config.ci_tool = obj["ci_tool"]
        validate(config)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    try:
        traces = load_traces(trace_path)
    except TraceFileError as exc:
        click.echo(f"Trace error: {exc}", err=True)
        sys.exit(1)

    logger.debug("Loaded %d files from %s", len(traces.files()), trace_path)
    return config, traces


def _emit_json(data: Any, output_path: str | None, pretty: bool) -> None:
    """Write JSON to stdout or to *output_path*."""
    indent = 2 if pretty else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _redact(payload: dict) -> dict:
    for key in ("repo_token", "service_job_id"):
        if key in payload:
            payload[key] = "***"
    return payload


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default=None,
              help="Path to a YAML configuration file (environment only if omitted).")
@click.option("--root", default=None,
              help="Project root that source paths are reported relative to.")
@click.option("--endpoint", default=None,
              help="Send to this URL instead of coveralls.io.")
@click.option("--ci-tool", "ci_tool", default=None,
              help="CI service name; sends the key as a service job id.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="coveralls-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, root: str | None,
        endpoint: str | None, ci_tool: str | None, verbose: bool) -> None:
    """Coveralls exporter — upload line coverage traces to Coveralls."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["root"] = root
    ctx.obj["endpoint"] = endpoint
    ctx.obj["ci_tool"] = ci_tool
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="coveralls-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template coveralls-config.yaml file."""
    from coveralls_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your repo token and project root.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# preview
# ---------------------------------------------------------------------------

@cli.command("preview")
@click.argument("traces", type=click.Path(dir_okay=False))
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.pass_context
def preview_command(ctx: click.Context, traces: str, output_path: str | None,
                    pretty: bool) -> None:
    """Print the report for TRACES without sending it. Tokens are redacted."""
    from coveralls_report.ci import detect_provider
    from coveralls_report.errors import ExportError
    from coveralls_report.export import build_report

    config, dataset = _load_inputs(ctx, traces)

    provider = detect_provider()
    if ctx.obj["verbose"]:
        name = provider.name if provider else "none"
        click.echo(f"[verbose] CI provider: {name}", err=True)

    try:
        report = build_report(dataset, config)
    except ExportError as exc:
        click.echo(f"Export error: {exc}", err=True)
        sys.exit(1)

    _emit_json(_redact(report.to_dict()), output_path, pretty)


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------

@cli.command("send")
@click.argument("traces", type=click.Path(dir_okay=False))
@click.pass_context
def send_command(ctx: click.Context, traces: str) -> None:
    """Submit the coverage in TRACES to Coveralls."""
    from coveralls_report.errors import ExportError
    from coveralls_report.export import export

    config, dataset = _load_inputs(ctx, traces)

    try:
        export(dataset, config)
    except ExportError as exc:
        click.echo(f"Export error: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"Sent {len(dataset.files())} files, "
        f"{dataset.coverage_percentage():.2f}% line coverage "
        f"({dataset.covered_lines()}/{dataset.coverable_lines()})."
    )
