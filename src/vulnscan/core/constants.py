# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, severity ranks, and scan defaults."""

from enum import StrEnum


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class CalibratedSeverity(StrEnum):
    """Severity returned by the enrichment service; none marks a false positive."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ScanStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class TargetDirectory(StrEnum):
    AUTO = "auto"
    APP = "app"
    ROOT = "root"


SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

ENGINE_SEMGREP = "semgrep"

DEFAULT_EXCLUDES: tuple[str, ...] = (
    "node_modules",
    "vendor",
    "tmp",
    "log",
    "public",
    "storage",
    "dist",
    "build",
    "coverage",
    ".git",
)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".rb", ".py", ".js", ".jsx", ".ts", ".tsx")

DEFAULT_SEMGREP_CONFIGS: tuple[str, ...] = ("p/owasp-top-ten", "p/ruby")

# Used when a run with a large rule-set list fails outright.
REDUCED_SEMGREP_CONFIGS: tuple[str, ...] = (
    "p/owasp-top-ten",
    "p/secrets",
    "p/ruby",
    "p/javascript",
)
REDUCED_RETRY_MIN_CONFIGS = 6

MIN_BATCH_SIZE = 10
MIN_TIMEOUT_SECONDS = 10
MAX_ENRICH_CONCURRENCY = 8
MAX_ENRICH_LIST_ITEMS = 5
