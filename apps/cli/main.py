"""Typer CLI entrypoint for ssr-diag."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Literal, cast
from urllib.parse import quote

import typer

from apps.cli.format_text import terminal_style
from apps.cli.io import write_report_json_atomic
from core.capture.browser import PlaywrightSnapshotSource
from core.capture.models import Snapshot, SnapshotSource
from core.capture.static_server import serve_folder
from core.diag.models import DiagPolicy
from core.diag.policy_loader import load_policy
from core.diag.relevance import RelevancePredicate, marker_predicate, match_all
from core.diag.reporter import render
from core.orchestrator.pipeline import diagnose
from core.utils.errors import AcquisitionError
from core.utils.log_events import log_event

# Exit code Click uses for usage errors in standalone mode.
_USAGE_ERROR_EXIT_CODE = 2

app = typer.Typer(
    help="Scan SSR output folders for hydration mismatches.",
    rich_markup_mode=None,
    add_completion=False,
)
logger = logging.getLogger("ssrdiag.cli")

ReportFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunOptions:
    folder: Path
    index: str
    port: int | None
    report_format: ReportFormat
    policy: DiagPolicy
    predicate: RelevancePredicate
    settle_ms: int


@app.callback(invoke_without_command=True)
def cli_callback(ctx: typer.Context) -> None:
    """Detect hydration mismatches between server-rendered and hydrated markup."""

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


@app.command("run")
def run_command(
    ctx: typer.Context,
    path: Annotated[
        Path | None,
        typer.Argument(help="SSR output folder containing the built HTML."),
    ] = None,
    index: Annotated[
        str, typer.Option("--index", "-i", help="HTML filename to serve.")
    ] = "index.html",
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port for the static server (default: random)."),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Print extra debug information.")
    ] = False,
    report_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text or json.")
    ] = "text",
    verbose_json: Annotated[
        bool,
        typer.Option("--verbose-json", help="Include full mismatch line text in JSON output."),
    ] = False,
    root_marker: Annotated[
        list[str] | None,
        typer.Option(
            "--root-marker",
            help="Regex marking the hydration root; repeatable. Overrides the policy markers.",
        ),
    ] = None,
    report_all: Annotated[
        bool, typer.Option("--all", help="Report every mismatch, skipping the root filter.")
    ] = False,
    settle_ms: Annotated[
        int | None,
        typer.Option("--settle-ms", help="Delay after page load before reading the DOM."),
    ] = None,
    policy: Annotated[Path | None, typer.Option(help="Diagnosis policy YAML file.")] = None,
    report_file: Annotated[
        Path | None,
        typer.Option("--report-file", help="Also write the JSON report to this path."),
    ] = None,
) -> None:
    """Serve an SSR output folder, hydrate it in a browser, and diff both DOM states."""

    if path is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    _configure_logging(verbose)

    try:
        options = _resolve_options(
            folder=path,
            index=index,
            port=port,
            report_format=report_format,
            root_marker=root_marker,
            report_all=report_all,
            settle_ms=settle_ms,
            policy_path=policy,
        )
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if verbose:
        typer.echo(f"[ssr-diag] Serving folder: {options.folder}", err=True)

    exit_code = 1
    stage = "acquire"
    try:
        snapshot = _acquire_snapshot(options, verbose=verbose)
        stage = "diagnose"
        report = diagnose(
            snapshot.server_html,
            snapshot.client_html,
            options.policy,
            predicate=options.predicate,
            keep_full_text=verbose_json,
        )
        stage = "render"
        if report_file is not None:
            write_report_json_atomic(report_file, report.to_payload())
        if options.report_format == "json":
            output, exit_code = render(report, "json")
            typer.echo(output)
        else:
            output, exit_code = render(report, "text", style=terminal_style)
            typer.echo(output, err=exit_code != 0)
            if snapshot.page_errors:
                typer.echo(
                    "WARNING(page): errors reported during hydration "
                    f"(count={len(snapshot.page_errors)}).",
                    err=True,
                )
        log_event(
            logger,
            logging.INFO,
            "done",
            mismatches=len(report.mismatches),
            exit_code=exit_code,
        )
    except AcquisitionError as exc:
        exit_code = 1
        log_event(logger, logging.ERROR, "failed", stage=exc.stage, error=str(exc))
        typer.echo(f"ERROR: {exc}", err=True)
    except Exception as exc:  # noqa: BLE001
        exit_code = 1
        logger.exception("unexpected error during %s", stage)
        typer.echo(f"[ssr-diag] Unexpected error: {type(exc).__name__}: {exc}", err=True)

    raise typer.Exit(code=exit_code)


def _resolve_options(
    *,
    folder: Path,
    index: str,
    port: int | None,
    report_format: str,
    root_marker: list[str] | None,
    report_all: bool,
    settle_ms: int | None,
    policy_path: Path | None,
) -> RunOptions:
    normalized_format = report_format.lower().strip()
    if normalized_format not in {"text", "json"}:
        raise ValueError("--format must be one of: text, json.")
    if port is not None and not 0 <= port <= 65535:
        raise ValueError("--port must be between 0 and 65535.")
    if settle_ms is not None and settle_ms < 0:
        raise ValueError("--settle-ms must not be negative.")
    if not index.strip():
        raise ValueError("--index must not be empty.")

    policy_model = load_policy(policy_path)
    if report_all:
        predicate: RelevancePredicate = match_all
    else:
        predicate = marker_predicate(root_marker or policy_model.root_markers)

    return RunOptions(
        folder=folder.resolve(),
        index=index.lstrip("/"),
        port=port or None,
        report_format=cast(ReportFormat, normalized_format),
        policy=policy_model,
        predicate=predicate,
        settle_ms=policy_model.settle_ms if settle_ms is None else settle_ms,
    )


def _acquire_snapshot(options: RunOptions, *, verbose: bool) -> Snapshot:
    with serve_folder(options.folder, options.port) as base_url:
        url = f"{base_url}/{quote(options.index)}"
        if verbose or options.report_format == "text":
            typer.echo(f"[ssr-diag] Serving {options.folder} → {url}", err=True)
        log_event(logger, logging.INFO, "resolved_url", folder=str(options.folder), url=url)
        source = _build_snapshot_source(settle_ms=options.settle_ms, verbose=verbose)
        return source.capture(url)


def _build_snapshot_source(*, settle_ms: int, verbose: bool) -> SnapshotSource:
    def _echo_page_console(kind: str, text: str) -> None:
        if kind == "log":
            typer.echo(f"[page] {text}", err=True)
        elif verbose:
            typer.echo(f"[page:{kind}] {text}", err=True)

    return PlaywrightSnapshotSource(settle_ms=settle_ms, on_console=_echo_page_console)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        stream=sys.stderr,
        format="[%(name)s] %(levelname)s %(message)s",
        force=True,
    )


def main() -> None:
    """Console script entrypoint; usage errors exit with 1 instead of 2."""

    try:
        app()
    except SystemExit as exc:
        if exc.code == _USAGE_ERROR_EXIT_CODE:
            raise SystemExit(1) from exc
        raise


if __name__ == "__main__":
    main()
