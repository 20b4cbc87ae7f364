# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer

from vulnscan.core.constants import Severity

app = typer.Typer(
    name="vulnscan",
    help="Batched Semgrep scanning with AI enrichment and patch application",
    no_args_is_help=True,
)


class OutputFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"
    MARKDOWN = "markdown"
    SARIF = "sarif"


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (defaults to VULNSCAN_LOG_LEVEL)"),
    ] = None,
) -> None:
    """Configure logging for every command."""
    from vulnscan.core.config import get_settings
    from vulnscan.core.logging import setup_logging

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


@app.command()
def scan(
    path: Annotated[
        Path, typer.Argument(help="Workspace root to scan")
    ] = Path("."),
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
    min_severity: Annotated[
        Severity | None,
        typer.Option("--min-severity", help="Lowest severity to report"),
    ] = None,
    no_ai: Annotated[
        bool, typer.Option("--no-ai", help="Skip AI enrichment")
    ] = False,
    configs: Annotated[
        list[str] | None,
        typer.Option("--config", "-c", help="Semgrep rule set (repeatable)"),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", help="Files per scanner process (min 10)"),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", help="Per-batch timeout in seconds (min 10)"),
    ] = None,
    ci_mode: Annotated[
        bool,
        typer.Option("--ci-mode", help="Enable CI mode with standardized exit codes"),
    ] = False,
    fail_on: Annotated[
        Severity,
        typer.Option("--fail-on", help="Severity that fails the build in CI mode"),
    ] = Severity.HIGH,
    upload: Annotated[
        bool,
        typer.Option("--upload", help="Upload the findings to the configured backend"),
    ] = False,
) -> None:
    """Scan a workspace with Semgrep and report the findings."""
    exit_code = asyncio.run(
        _async_scan(
            path,
            fmt,
            output,
            min_severity=min_severity,
            no_ai=no_ai,
            configs=configs,
            batch_size=batch_size,
            timeout=timeout,
            ci_mode=ci_mode,
            fail_on=fail_on,
            upload=upload,
        )
    )
    if exit_code:
        raise typer.Exit(exit_code)


async def _async_scan(
    path: Path,
    fmt: OutputFormat,
    output: Path | None,
    *,
    min_severity: Severity | None,
    no_ai: bool,
    configs: list[str] | None,
    batch_size: int | None,
    timeout: int | None,
    ci_mode: bool,
    fail_on: Severity,
    upload: bool,
) -> int:
    from vulnscan.ci.exit_codes import CIExitCode, report_to_exit_code
    from vulnscan.core.config import get_settings
    from vulnscan.core.constants import ScanStatus
    from vulnscan.core.exceptions import ToolNotFoundError, UploadError
    from vulnscan.scanner.cancellation import CancelToken
    from vulnscan.scanner.pipeline import ScanPipeline
    from vulnscan.sdk import build_settings

    if not path.is_dir():
        typer.echo(f"Workspace not found: {path}", err=True)
        return int(CIExitCode.SCAN_ERROR)

    settings = build_settings(
        get_settings(),
        configs=configs,
        min_severity=min_severity,
        batch_size=batch_size,
        timeout_sec=timeout,
    )
    pipeline = ScanPipeline(settings=settings)

    cancel_token = CancelToken()
    loop = asyncio.get_running_loop()
    handler_installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, cancel_token.cancel)
        handler_installed = True

    try:
        report = await pipeline.scan_workspace(
            path, cancel_token=cancel_token, enrich=not no_ai
        )
    except ToolNotFoundError as exc:
        typer.echo(f"Error: {exc}", err=True)
        typer.echo("Install semgrep (pip install semgrep) or set VULNSCAN_SEMGREP_BIN.", err=True)
        return int(CIExitCode.SCAN_ERROR)
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)

    if report.status == ScanStatus.CANCELLED:
        typer.echo("Scan cancelled; reporting partial results.", err=True)

    _output_report(report, fmt, output)

    if upload:
        from vulnscan.ingest.uploader import FindingUploader, upload_report

        if not settings.backend_base_url or not settings.backend_token:
            typer.echo("Upload skipped: VULNSCAN_BACKEND_BASE_URL/TOKEN not set", err=True)
        else:
            uploader = FindingUploader(
                settings.backend_base_url,
                settings.backend_token,
                timeout=settings.backend_timeout,
            )
            try:
                scan_id, accepted = await upload_report(uploader, report)
                typer.echo(f"Uploaded {accepted}/{len(report.items)} findings to scan {scan_id}", err=True)
            except UploadError as exc:
                typer.echo(f"Upload failed: {exc}", err=True)

    if ci_mode:
        return int(report_to_exit_code(report, fail_on))
    if report.status == ScanStatus.FAILED:
        return int(CIExitCode.SCAN_ERROR)
    return 0


def _output_report(report, fmt: OutputFormat, output: Path | None) -> None:
    if fmt == OutputFormat.CONSOLE:
        from vulnscan.report.console import format_console
        format_console(report)
    elif fmt == OutputFormat.JSON:
        from vulnscan.report.json_fmt import format_json
        _write_output(format_json(report), output)
    elif fmt == OutputFormat.MARKDOWN:
        from vulnscan.report.markdown import render_markdown
        _write_output(render_markdown(report.items), output)
    elif fmt == OutputFormat.SARIF:
        from vulnscan.report.sarif import format_sarif
        _write_output(format_sarif(report), output)


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Output written to {output}")
    else:
        sys.stdout.write(text + "\n")


@app.command(name="apply-patch")
def apply_patch(
    file: Annotated[Path, typer.Argument(help="File to patch")],
    diff_file: Annotated[Path, typer.Argument(help="Unified diff to apply")],
    snippet_file: Annotated[
        Path | None,
        typer.Option("--snippet-file", help="Source snippet the diff was generated from"),
    ] = None,
) -> None:
    """Apply a unified diff to a file. Nothing is written on failure."""
    from vulnscan.sdk import apply_patch_sync

    if not file.is_file():
        typer.echo(f"File not found: {file}", err=True)
        raise typer.Exit(1)
    diff = diff_file.read_text(encoding="utf-8")
    snippet = snippet_file.read_text(encoding="utf-8") if snippet_file else None

    outcome = apply_patch_sync(file, diff, snippet=snippet)
    if not outcome.ok:
        typer.echo(f"Patch not applied: {outcome.reason}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Patched {file} ({outcome.strategy})")


def _ignore_store(workspace: Path):
    from vulnscan.core.config import get_settings
    from vulnscan.storage.ignored import IgnoreStore

    path = get_settings().ignore_file
    if not path.is_absolute():
        path = workspace.resolve() / path
    return IgnoreStore(path)


@app.command()
def ignore(
    fingerprint: Annotated[str, typer.Argument(help="Finding fingerprint to toggle")],
    workspace: Annotated[
        Path, typer.Option("--workspace", "-w", help="Workspace root")
    ] = Path("."),
) -> None:
    """Mark a finding as a false positive, or restore it if already ignored."""
    store = _ignore_store(workspace)
    if store.toggle(fingerprint):
        typer.echo(f"Ignored {fingerprint}")
    else:
        typer.echo(f"Restored {fingerprint}")


@app.command()
def ignored(
    workspace: Annotated[
        Path, typer.Option("--workspace", "-w", help="Workspace root")
    ] = Path("."),
) -> None:
    """List the fingerprints marked as false positives."""
    fingerprints = sorted(_ignore_store(workspace).load())
    if not fingerprints:
        typer.echo("No ignored findings.")
        return
    for fingerprint in fingerprints:
        typer.echo(fingerprint)


@app.command()
def watch(
    path: Annotated[
        Path, typer.Argument(help="Directory to watch")
    ] = Path("."),
    poll_interval: Annotated[
        float | None,
        typer.Option("--poll-interval", help="Poll interval in seconds"),
    ] = None,
) -> None:
    """Rescan changed files as they are edited. Press Ctrl+C to stop."""
    from rich.console import Console

    console = Console()
    if not path.is_dir():
        console.print(f"[red]Directory not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        asyncio.run(_async_watch(path, poll_interval, console))
    except KeyboardInterrupt:
        console.print("\n[dim]Watch mode stopped.[/dim]")


async def _async_watch(path: Path, poll_interval: float | None, console) -> None:
    from rich.panel import Panel

    from vulnscan.core.config import get_settings
    from vulnscan.diagnostics.registry import DiagnosticRegistry
    from vulnscan.live.scanner import LiveScanner
    from vulnscan.scanner.cancellation import CancelToken
    from vulnscan.scanner.semgrep import SemgrepAdapter

    settings = get_settings()
    interval = poll_interval if poll_interval is not None else settings.live_poll_interval
    root = path.resolve()

    console.print(
        Panel(
            f"[bold blue]Watch Mode[/bold blue]\n"
            f"Watching: {root}\n"
            f"Poll interval: {interval}s\n"
            f"Press Ctrl+C to stop.",
            border_style="blue",
        )
    )

    def on_publish(file: str, findings) -> None:
        color = "yellow" if findings else "green"
        console.print(f"[{color}]{file}: {len(findings)} finding(s)[/{color}]")
        for finding in findings:
            console.print(
                f"  {finding.severity.upper():<9} {finding.rule_id} line {finding.range.start.line + 1}",
                markup=False,
            )

    registry = DiagnosticRegistry()
    live = LiveScanner(
        SemgrepAdapter(binary=settings.semgrep_bin or None),
        registry,
        settings.semgrep_configs,
        settings.timeout_sec,
        extensions=settings.allowed_extensions,
        debounce_seconds=settings.live_debounce_seconds,
        project_root=root,
        on_publish=on_publish,
    )

    cancel_token = CancelToken()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, cancel_token.cancel)

    await live.watch(root, interval, cancel_token=cancel_token, excludes=settings.exclude_dirs)
    console.print(f"\n[dim]Watch mode stopped. {len(registry)} findings in {len(registry.files())} files.[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from vulnscan import __version__

    typer.echo(f"vulnscan v{__version__}")
