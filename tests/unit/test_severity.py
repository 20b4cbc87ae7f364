# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for severity ranking, filtering, and ordering."""

from __future__ import annotations

import pytest

from vulnscan.core.constants import Severity
from vulnscan.models.finding import Finding, Position, Range
from vulnscan.scanner.severity import (
    count_by_severity,
    filter_by_severity,
    highest_severity,
    passes_threshold,
    rank,
    sort_findings,
)


def make_finding(
    file: str = "/w/a.py",
    rel_file: str = "a.py",
    line: int = 1,
    message: str = "m",
    severity: Severity = Severity.LOW,
) -> Finding:
    return Finding(
        fingerprint=f"{file}:{line}:{message}:{severity}",
        rule_id="rule",
        severity=severity,
        file=file,
        rel_file=rel_file,
        range=Range(start=Position(line=line), end=Position(line=line + 1)),
        message=message,
    )


ALL = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


def _one_of_each():
    return [
        make_finding(line=i, severity=sev, message=f"m{i}")
        for i, sev in enumerate(ALL)
    ]


class TestRank:
    def test_total_order(self) -> None:
        assert [rank(s) for s in ALL] == [0, 1, 2, 3, 4]

    def test_accepts_strings(self) -> None:
        assert rank("high") == 3


class TestFilter:
    @pytest.mark.parametrize("threshold", ALL)
    def test_passes_iff_rank_at_least_threshold(self, threshold) -> None:
        for finding in _one_of_each():
            expected = rank(finding.severity) >= rank(threshold)
            assert passes_threshold(finding, threshold) is expected

    def test_monotonic(self) -> None:
        findings = _one_of_each()
        for lower, higher in zip(ALL, ALL[1:], strict=False):
            strict = filter_by_severity(findings, higher)
            loose = filter_by_severity(findings, lower)
            assert set(f.fingerprint for f in strict) <= set(f.fingerprint for f in loose)

    def test_critical_subset_of_low(self) -> None:
        findings = _one_of_each()
        critical = filter_by_severity(findings, "critical")
        low = filter_by_severity(findings, "low")
        assert [f.severity for f in critical] == [Severity.CRITICAL]
        assert len(low) == 4
        assert all(f in low for f in critical)


class TestOrdering:
    def test_by_file_then_severity_desc(self) -> None:
        items = [
            make_finding(file="/w/b.py", rel_file="b.py", severity=Severity.LOW),
            make_finding(file="/w/a.py", rel_file="a.py", severity=Severity.MEDIUM),
            make_finding(file="/w/b.py", rel_file="b.py", severity=Severity.CRITICAL, line=3),
            make_finding(file="/w/a.py", rel_file="a.py", severity=Severity.HIGH, line=4),
        ]
        ordered = sort_findings(items)
        assert [(f.rel_file, f.severity) for f in ordered] == [
            ("a.py", Severity.HIGH),
            ("a.py", Severity.MEDIUM),
            ("b.py", Severity.CRITICAL),
            ("b.py", Severity.LOW),
        ]

    def test_highest_and_counts(self) -> None:
        findings = _one_of_each()[:3]
        assert highest_severity(findings) == Severity.MEDIUM
        assert highest_severity([]) is None
        counts = count_by_severity(findings)
        assert counts == {"critical": 0, "high": 0, "medium": 1, "low": 1, "info": 1}
