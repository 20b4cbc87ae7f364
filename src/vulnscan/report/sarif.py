# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF 2.1.0 output formatter."""

from __future__ import annotations

import json
from typing import Any

from vulnscan import __version__
from vulnscan.core.constants import Severity
from vulnscan.models.scan import ScanReport

SEVERITY_TO_SARIF_LEVEL = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "note",
}


def report_to_sarif(report: ScanReport) -> dict[str, Any]:
    """Convert a ScanReport to SARIF 2.1.0. Regions are 1-based."""
    rules: list[dict[str, Any]] = []
    seen_rules: set[str] = set()
    results: list[dict[str, Any]] = []

    for item in report.items:
        finding = item.finding
        level = SEVERITY_TO_SARIF_LEVEL.get(finding.severity, "warning")
        if finding.rule_id not in seen_rules:
            seen_rules.add(finding.rule_id)
            rules.append({
                "id": finding.rule_id,
                "shortDescription": {"text": finding.message},
                "defaultConfiguration": {"level": level},
            })

        region = {
            "startLine": finding.range.start.line + 1,
            "startColumn": finding.range.start.col + 1,
            "endLine": finding.range.end.line + 1,
            "endColumn": finding.range.end.col + 1,
        }
        sarif_result: dict[str, Any] = {
            "ruleId": finding.rule_id,
            "level": level,
            "message": {"text": finding.message},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": finding.rel_file.replace("\\", "/")},
                        "region": region,
                    }
                }
            ],
            "partialFingerprints": {"vulnscan/v1": finding.fingerprint},
        }

        properties: dict[str, Any] = {"severity": finding.severity.value}
        if item.cwe:
            properties["cwe"] = item.cwe
        if item.owasp:
            properties["owasp"] = item.owasp
        if item.confidence is not None:
            properties["confidence"] = item.confidence
        if item.calibrated_severity:
            properties["calibratedSeverity"] = item.calibrated_severity.value
        sarif_result["properties"] = properties

        results.append(sarif_result)

    return {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "vulnscan",
                        "version": __version__,
                        "rules": rules,
                    }
                },
                "results": results,
            }
        ],
    }


def format_sarif(report: ScanReport) -> str:
    """Return SARIF JSON string."""
    return json.dumps(report_to_sarif(report), indent=2)
