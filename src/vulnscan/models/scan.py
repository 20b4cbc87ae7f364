# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan inputs, batches, and the final report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from vulnscan.core.constants import SEVERITY_RANK, ScanStatus, Severity
from vulnscan.models.finding import EnrichedFinding
from vulnscan.models.raw import RawRecord


@dataclass(frozen=True, slots=True)
class FileTask:
    """A candidate file produced by enumeration."""

    path: str
    extension: str
    size: int


@dataclass(frozen=True, slots=True)
class ScanBatch:
    """A contiguous slice of files sent to the scanner in one process."""

    index: int
    paths: tuple[str, ...]
    configs: tuple[str, ...]
    timeout_seconds: int


@dataclass(slots=True)
class BatchRunResult:
    """Records accumulated by a batch run, possibly cut short by cancellation."""

    records: list[RawRecord] = field(default_factory=list)
    batches_total: int = 0
    batches_completed: int = 0
    files_processed: int = 0
    cancelled: bool = False


class ScanReport(BaseModel):
    """Complete, ordered result of a workspace scan."""

    workspace_root: str
    target_root: str
    configs: list[str] = Field(default_factory=list)
    min_severity: Severity = Severity.LOW
    status: ScanStatus = ScanStatus.PENDING
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    duration_ms: int | None = None
    files_enumerated: int = 0
    files_scanned: int = 0
    raw_count: int = 0
    ignored_count: int = 0
    items: list[EnrichedFinding] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def highest_severity(self) -> Severity | None:
        if not self.items:
            return None
        return max(self.items, key=lambda i: SEVERITY_RANK[i.severity]).severity

    @computed_field  # type: ignore[prop-decorator]
    @property
    def finding_count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for item in self.items:
            counts[item.severity] = counts.get(item.severity, 0) + 1
        return counts
