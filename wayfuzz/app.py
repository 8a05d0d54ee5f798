"""Typer CLI entrypoint for wayfuzz."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Annotated, Optional, TextIO

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Settings, load_settings
from .engine import TEXT_ERRORS, ArchiveFetcher
from .engine.exporter import StreamExporter
from .exceptions import ConfigError
from .logging_conf import configure_logging
from .pipeline import Pipeline, RecordSource, RunSummary, emit, format_fetch_error

app = typer.Typer(
    help="Collect historical URLs of domains read from stdin out of the web archive index.",
    add_completion=False,
    rich_markup_mode=None,
)

err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)


def build_fetcher(settings: Settings) -> RecordSource:
    return ArchiveFetcher.from_settings(settings)


def read_domains() -> TextIO:
    """Stdin split on ``\\n`` only, with undecodable bytes kept as escapes."""

    stdin = sys.stdin
    if isinstance(stdin, io.TextIOWrapper):
        stdin.reconfigure(encoding="utf-8", errors=TEXT_ERRORS, newline="\n")
    return stdin


def report_error(domain: str, error: BaseException) -> None:
    err_console.print(format_fetch_error(domain, error), markup=False)


def _render_summary(summary: RunSummary) -> Table:
    table = Table(title="wayfuzz run summary", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Domains", str(summary.domains))
    table.add_row("Failed", str(len(summary.failed)))
    table.add_row("Records fetched", str(summary.records))
    table.add_row("Items collected", str(summary.collected))
    table.add_row("Unique items", str(summary.unique))
    return table


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wayfuzz {__version__}")
        raise typer.Exit()


@app.command()
def main(
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", help="Number of concurrent requests (default 10).", min=1),
    ] = None,
    exclude: Annotated[
        Optional[str],
        typer.Option("--exclude", "-x", help="Regex pattern to exclude URLs, e.g. '\\.(jpg|png)$'."),
    ] = None,
    separate_slash: Annotated[
        bool, typer.Option("--sed", "--separate-slash", help="Split URL paths on '/'.")
    ] = False,
    status_codes: Annotated[
        Optional[str],
        typer.Option("--status-codes", "-s", help="Keep only records with these status codes, e.g. 200,301."),
    ] = None,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Network operation timeout in seconds (default 30)."),
    ] = None,
    deadline: Annotated[
        Optional[float],
        typer.Option("--deadline", help="Upper bound in seconds for one domain's fetch."),
    ] = None,
    endpoint: Annotated[
        Optional[str],
        typer.Option("--endpoint", help="Archive index CDX endpoint."),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", help="YAML or JSON settings file (env: WAYFUZZ_CONFIG)."),
    ] = None,
    skip_blank: Annotated[
        bool, typer.Option("--skip-blank", help="Ignore blank input lines instead of querying them.")
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write results to a file instead of stdout."),
    ] = None,
    output_format: Annotated[
        Optional[str],
        typer.Option("--format", help="Output format: txt or json."),
    ] = None,
    stats: Annotated[
        bool, typer.Option("--stats", help="Print a run summary table to stderr.")
    ] = False,
    fail_on_error: Annotated[
        bool, typer.Option("--fail-on-error", help="Exit with code 1 when any domain failed.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging on stderr.")
    ] = False,
    log_file: Annotated[
        Optional[Path], typer.Option("--log-file", help="Also write JSON logs to this file.")
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """Read domains from stdin and print their archived URLs, deduplicated and sorted."""

    logger = configure_logging(verbose=verbose, log_file=log_file)
    try:
        settings = load_settings(
            config,
            {
                "concurrency": concurrency,
                "exclude_pattern": exclude,
                "separate_slash": True if separate_slash else None,
                "status_codes": status_codes,
                "timeout": timeout,
                "deadline": deadline,
                "endpoint": endpoint,
                "skip_blank_lines": True if skip_blank else None,
                "output_format": output_format,
            },
        )
        filter_config = settings.filter_config()
    except ConfigError as exc:
        err_console.print(f"Configuration error: {exc}", markup=False)
        raise typer.Exit(code=2) from exc

    logger.debug("settings_loaded", **settings.model_dump(mode="json"))
    fetcher = build_fetcher(settings)
    try:
        pipeline = Pipeline(settings, fetcher, reporter=report_error, filter_config=filter_config)
        summary = pipeline.run(read_domains())
    finally:
        close = getattr(fetcher, "close", None)
        if callable(close):
            close()

    emit(summary.urls, StreamExporter.open(output, settings.output_format))
    if stats:
        err_console.print(_render_summary(summary))
    if fail_on_error and summary.failed:
        raise typer.Exit(code=1)


__all__ = ["app", "build_fetcher", "main"]
