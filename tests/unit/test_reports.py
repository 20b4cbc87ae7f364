# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the markdown, JSON, SARIF and console formatters."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from rich.console import Console

from vulnscan.core.constants import CalibratedSeverity, ScanStatus, Severity
from vulnscan.models.finding import EnrichedFinding
from vulnscan.models.scan import ScanReport
from vulnscan.report.console import format_console
from vulnscan.report.json_fmt import format_json, format_json_summary
from vulnscan.report.markdown import render_markdown
from vulnscan.report.sarif import format_sarif, report_to_sarif


@pytest.fixture
def items(finding_factory) -> list[EnrichedFinding]:
    sql = finding_factory(
        rel_file="app/models/user.rb",
        snippet='User.where("name = #{q}")',
    )
    enriched = EnrichedFinding(
        finding=sql,
        calibrated_severity=CalibratedSeverity.HIGH,
        confidence=0.86,
        explanation="User input reaches a raw SQL fragment.",
        unified_diff='--- a/app/models/user.rb\n+++ b/app/models/user.rb\n@@ -11 +11 @@\n-x\n+y',
        suggested_tests=["rejects quotes in q"],
        references=["https://owasp.org/www-community/attacks/SQL_Injection"],
        cwe="CWE-89",
        owasp="A03:2021",
    )
    plain = EnrichedFinding.unenriched(
        finding_factory(
            file="/work/app/views/show.rb",
            rel_file="app/views/show.rb",
            rule_id="ruby.rails.security.xss",
            line=0,
            message="Possible XSS",
            severity=Severity.LOW,
        )
    )
    return [enriched, plain]


@pytest.fixture
def report(items: list[EnrichedFinding]) -> ScanReport:
    return ScanReport(
        workspace_root="/work",
        target_root="/work/app",
        configs=["p/ruby"],
        status=ScanStatus.COMPLETED,
        files_enumerated=4,
        files_scanned=4,
        ignored_count=1,
        duration_ms=1500,
        items=items,
    )


class TestMarkdown:
    def test_header_totals(self, items) -> None:
        text = render_markdown(items)
        assert text.startswith("# Security Report\n\n")
        assert "Critical: 0 · High: 1 · Medium: 0 · Low: 1 · Info: 0" in text

    def test_enriched_item(self, items) -> None:
        text = render_markdown(items)
        assert "### [HIGH] app/models/user.rb - ruby.rails.security.sql-injection" in text
        assert "- File: app/models/user.rb:11" in text
        assert "- CWE: CWE-89" in text
        assert "- Confidence: 86%" in text
        assert "- Calibrated: high" in text
        assert "User input reaches a raw SQL fragment." in text
        assert '```\nUser.where("name = #{q}")\n```' in text
        assert "```diff\n--- a/app/models/user.rb" in text
        assert "- rejects quotes in q" in text
        assert "- https://owasp.org/www-community/attacks/SQL_Injection" in text

    def test_unenriched_item_is_minimal(self, items) -> None:
        section = render_markdown(items).split("### [LOW]")[1]
        assert "- File: app/views/show.rb:1" in section
        assert "Confidence" not in section
        assert "```" not in section

    def test_order_preserved(self, items) -> None:
        text = render_markdown(list(reversed(items)))
        assert text.index("[LOW]") < text.index("[HIGH]")

    def test_empty(self) -> None:
        assert render_markdown([]).startswith("# Security Report")


class TestJson:
    def test_full_report(self, report: ScanReport) -> None:
        data = json.loads(format_json(report))
        assert data["status"] == "completed"
        assert data["highest_severity"] == "high"
        assert data["finding_count_by_severity"] == {"high": 1, "low": 1}
        assert data["items"][0]["finding"]["rule_id"] == "ruby.rails.security.sql-injection"

    def test_round_trips_into_model(self, report: ScanReport) -> None:
        restored = ScanReport.model_validate_json(format_json(report))
        assert [i.fingerprint for i in restored.items] == [i.fingerprint for i in report.items]

    def test_summary(self, report: ScanReport) -> None:
        data = json.loads(format_json_summary(report))
        assert data["finding_count"] == 2
        assert data["ignored_count"] == 1
        assert "items" not in data


class TestSarif:
    def test_structure(self, report: ScanReport) -> None:
        sarif = report_to_sarif(report)
        assert sarif["version"] == "2.1.0"
        run = sarif["runs"][0]
        assert run["tool"]["driver"]["name"] == "vulnscan"
        assert {r["id"] for r in run["tool"]["driver"]["rules"]} == {
            "ruby.rails.security.sql-injection",
            "ruby.rails.security.xss",
        }

    def test_result_fields(self, report: ScanReport) -> None:
        result = report_to_sarif(report)["runs"][0]["results"][0]
        location = result["locations"][0]["physicalLocation"]

        assert result["level"] == "error"
        assert location["artifactLocation"]["uri"] == "app/models/user.rb"
        assert location["region"] == {
            "startLine": 11,
            "startColumn": 5,
            "endLine": 11,
            "endColumn": 31,
        }
        assert result["partialFingerprints"]["vulnscan/v1"] == report.items[0].fingerprint
        assert result["properties"]["calibratedSeverity"] == "high"
        assert result["properties"]["cwe"] == "CWE-89"

    def test_low_maps_to_note(self, report: ScanReport) -> None:
        result = report_to_sarif(report)["runs"][0]["results"][1]
        assert result["level"] == "note"
        assert "confidence" not in result["properties"]

    def test_format_is_json(self, report: ScanReport) -> None:
        assert json.loads(format_sarif(report))["runs"][0]["results"]


class TestConsole:
    def _render(self, report: ScanReport) -> str:
        buffer = StringIO()
        format_console(report, Console(file=buffer, width=120, no_color=True))
        return buffer.getvalue()

    def test_lists_findings(self, report: ScanReport) -> None:
        out = self._render(report)
        assert "COMPLETED" in out
        assert "ruby.rails.security.sql-injection" in out
        assert "app/models/user.rb:11" in out
        assert "Fix available" in out
        assert "Summary: 2 findings" in out
        assert "Ignored: 1" in out

    def test_no_findings(self) -> None:
        empty = ScanReport(workspace_root="/w", target_root="/w", status=ScanStatus.COMPLETED)
        out = self._render(empty)
        assert "No findings." in out
        assert "0 findings" in out
