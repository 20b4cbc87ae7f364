# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Markdown security report."""

from __future__ import annotations

from collections.abc import Sequence

from vulnscan.models.finding import EnrichedFinding
from vulnscan.scanner.severity import count_by_severity


def _render_item(item: EnrichedFinding) -> str:
    finding = item.finding
    lines = [
        f"### [{finding.severity.upper()}] {finding.rel_file} - {finding.rule_id}",
        f"- File: {finding.rel_file}:{finding.range.start.line + 1}",
    ]
    if item.cwe:
        lines.append(f"- CWE: {item.cwe}")
    if item.owasp:
        lines.append(f"- OWASP: {item.owasp}")
    if item.confidence is not None:
        lines.append(f"- Confidence: {round(item.confidence * 100)}%")
    if item.calibrated_severity:
        lines.append(f"- Calibrated: {item.calibrated_severity}")

    body = "\n".join(lines)
    if item.explanation:
        body += f"\n\n{item.explanation}\n"
    if finding.snippet:
        body += f"\n**Snippet**:\n\n```\n{finding.snippet}\n```\n"
    if item.unified_diff:
        body += f"\n**Proposed fix (diff)**:\n\n```diff\n{item.unified_diff}\n```\n"
    if item.suggested_tests:
        tests = "\n".join(f"- {t}" for t in item.suggested_tests)
        body += f"\n**Suggested tests**:\n{tests}\n"
    if item.references:
        refs = "\n".join(f"- {r}" for r in item.references)
        body += f"\n**References**:\n{refs}\n"
    return body


def render_markdown(items: Sequence[EnrichedFinding]) -> str:
    """Render items, in the given order, under a totals header."""
    totals = count_by_severity(items)
    head = (
        "# Security Report\n\n"
        f"**Totals:** Critical: {totals['critical']} · High: {totals['high']} · "
        f"Medium: {totals['medium']} · Low: {totals['low']} · Info: {totals['info']}\n\n"
    )
    return head + "\n\n".join(_render_item(item) for item in items) + "\n"
