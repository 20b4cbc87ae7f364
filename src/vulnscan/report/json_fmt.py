# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON output formatter."""

from __future__ import annotations

import json

from vulnscan.models.scan import ScanReport


def format_json(report: ScanReport) -> str:
    """Return the full report as formatted JSON."""
    return report.model_dump_json(indent=2)


def format_json_summary(report: ScanReport) -> str:
    """Return a compact JSON summary without per-finding detail."""
    data = {
        "target_root": report.target_root,
        "status": report.status,
        "highest_severity": report.highest_severity,
        "finding_count": len(report.items),
        "finding_count_by_severity": report.finding_count_by_severity,
        "files_scanned": report.files_scanned,
        "ignored_count": report.ignored_count,
        "duration_ms": report.duration_ms,
        "errors": report.errors,
    }
    return json.dumps(data, indent=2)
