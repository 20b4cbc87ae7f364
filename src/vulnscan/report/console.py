# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output formatter for scan reports."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vulnscan import __version__
from vulnscan.core.constants import ScanStatus, Severity
from vulnscan.models.scan import ScanReport

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}

STATUS_COLORS = {
    ScanStatus.COMPLETED: "bold green",
    ScanStatus.CANCELLED: "yellow",
    ScanStatus.FAILED: "bold red",
}


def format_console(report: ScanReport, console: Console | None = None) -> None:
    """Print a scan report with Rich formatting."""
    if console is None:
        console = Console()

    console.print()
    console.print(f"[bold]vulnscan v{__version__}[/bold] - Static Analysis Orchestrator")
    console.print()

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_column("key", style="dim")
    info_table.add_column("value")
    info_table.add_row("Target:", report.target_root)
    info_table.add_row("Rulesets:", ", ".join(report.configs) or "N/A")
    info_table.add_row("Files:", f"{report.files_scanned}/{report.files_enumerated} scanned")
    info_table.add_row("Threshold:", f">= {report.min_severity}")
    console.print(info_table)
    console.print()

    status_color = STATUS_COLORS.get(report.status, "white")
    highest = report.highest_severity.upper() if report.highest_severity else "NONE"
    console.print(
        Panel(
            f"[{status_color}]{report.status.upper()}[/{status_color}]"
            f"  (highest severity: {highest})",
            style=status_color,
        )
    )
    console.print()

    if report.items:
        for item in report.items:
            finding = item.finding
            sev_color = SEVERITY_COLORS.get(finding.severity, "white")
            console.print(Text(finding.severity.upper().ljust(9), style=sev_color), end="")
            console.print(f"  [bold]{finding.rule_id}[/bold]")
            console.print(
                f"          {finding.rel_file}:{finding.range.start.line + 1}  {finding.message}",
                style="dim",
                markup=False,
            )
            if item.calibrated_severity:
                confidence = f"{item.confidence:.2f}" if item.confidence is not None else "n/a"
                console.print(
                    f"          Calibrated: {item.calibrated_severity}  Confidence: {confidence}",
                    style="dim",
                )
            if item.unified_diff:
                console.print("          Fix available", style="green")
            console.print(f"          {finding.fingerprint[:16]}", style="dim")
            console.print()
    else:
        console.print("  No findings.", style="bold green")
        console.print()

    counts = report.finding_count_by_severity
    parts = [f"{counts[sev]} {sev}" for sev in Severity if sev in counts]
    summary = ", ".join(parts) if parts else "0 findings"
    console.print(f"  Summary: {len(report.items)} findings ({summary})")
    if report.ignored_count:
        console.print(f"  Ignored: {report.ignored_count}", style="dim")
    if report.duration_ms is not None:
        console.print(f"  Duration: {report.duration_ms / 1000:.1f}s")
    for error in report.errors:
        console.print(f"  Error: {error}", style="red", markup=False)
    console.print()
