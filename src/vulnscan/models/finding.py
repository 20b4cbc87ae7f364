# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Canonical finding models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from vulnscan.core.constants import ENGINE_SEMGREP, CalibratedSeverity, Severity


class Position(BaseModel):
    """0-based line/column."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    col: int = Field(default=0, ge=0)


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class Finding(BaseModel):
    """A single normalized static-analysis result with a stable fingerprint."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    rule_id: str
    severity: Severity
    file: str = Field(description="Absolute path")
    rel_file: str = Field(description="Workspace-relative path")
    range: Range
    message: str
    engine: str = ENGINE_SEMGREP
    cwe: str | None = None
    owasp: str | None = None
    snippet: str | None = None


class EnrichedFinding(BaseModel):
    """A finding plus the (possibly empty) enrichment fields.

    When enrichment fails the finding is still published with the
    empty defaults below.
    """

    finding: Finding
    calibrated_severity: CalibratedSeverity | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    explanation: str = ""
    unified_diff: str | None = None
    suggested_tests: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)
    cwe: str | None = None
    owasp: str | None = None

    @classmethod
    def unenriched(cls, finding: Finding) -> EnrichedFinding:
        return cls(finding=finding, cwe=finding.cwe, owasp=finding.owasp)

    @property
    def fingerprint(self) -> str:
        return self.finding.fingerprint

    @property
    def severity(self) -> Severity:
        return self.finding.severity

    @property
    def rel_file(self) -> str:
        return self.finding.rel_file

    @property
    def is_enriched(self) -> bool:
        return bool(self.explanation or self.unified_diff or self.calibrated_severity)
