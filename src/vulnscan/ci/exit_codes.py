# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Standardized exit codes for CI/CD pipeline integrations.

Exit codes:
    0 - CLEAN: no findings at or above the fail-on severity
    1 - FINDINGS: at least one finding at or above the fail-on severity
    2 - ERROR: the scan could not complete
"""

from __future__ import annotations

from enum import IntEnum

from vulnscan.core.constants import ScanStatus, Severity
from vulnscan.models.scan import ScanReport
from vulnscan.scanner.severity import rank


class CIExitCode(IntEnum):
    """Exit codes used by vulnscan in CI mode."""

    CLEAN = 0
    FINDINGS = 1
    SCAN_ERROR = 2


def report_to_exit_code(report: ScanReport, fail_on: Severity | str = Severity.HIGH) -> CIExitCode:
    """Convert a scan report to a CI exit code.

    A failed scan is an error regardless of its partial findings.
    """
    if report.status == ScanStatus.FAILED:
        return CIExitCode.SCAN_ERROR
    threshold = rank(fail_on)
    if any(rank(item.severity) >= threshold for item in report.items):
        return CIExitCode.FINDINGS
    return CIExitCode.CLEAN
