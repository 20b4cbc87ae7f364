# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Map raw scanner records to canonical findings."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from vulnscan.core.constants import ENGINE_SEMGREP, Severity
from vulnscan.models.finding import Finding, Position, Range
from vulnscan.models.raw import RawPosition, RawRecord

logger = logging.getLogger("vulnscan.scanner.normalize")

_DEFAULT_MESSAGE = "Security issue"
_DEFAULT_RULE = "unknown"

# Vendor labels that the prefix heuristic would misread.
_SEVERITY_ALIASES: dict[str, Severity] = {
    "error": Severity.HIGH,
    "warning": Severity.MEDIUM,
}


def coerce_severity(label: object) -> Severity:
    """Lenient severity mapping tolerant of vendor label variance.

    ``crit`` anywhere -> critical, then the first letter decides
    (h/m/l), anything else is info.
    """
    text = str(label or "").strip().lower()
    if text in _SEVERITY_ALIASES:
        return _SEVERITY_ALIASES[text]
    if "crit" in text:
        return Severity.CRITICAL
    if text.startswith("h"):
        return Severity.HIGH
    if text.startswith("m"):
        return Severity.MEDIUM
    if text.startswith("l"):
        return Severity.LOW
    return Severity.INFO


def compute_fingerprint(file: str, rule_id: str, start_line: int, message: str) -> str:
    """Stable identity of a finding across rescans."""
    payload = "\x1f".join((file, rule_id, str(start_line), message))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def relative_path(path: str, project_root: str | None) -> str:
    """Strip *project_root* from *path*, else strip leading separators."""
    if project_root:
        for root in {project_root, project_root.replace("\\", "/")}:
            root = root.rstrip("/\\")
            if root and path.startswith(root) and path[len(root) : len(root) + 1] in ("/", "\\"):
                return path[len(root) + 1 :]
    return path.lstrip("/\\")


def _to_zero_based(pos: RawPosition) -> Position:
    return Position(line=max(0, pos.line - 1), col=max(0, pos.col - 1))


class Normalizer:
    """Validates raw records once and converts them into :class:`Finding` objects."""

    def __init__(self, project_root: str | Path | None = None) -> None:
        self.project_root = str(Path(project_root).resolve()) if project_root else None

    def _absolute(self, path: str) -> str:
        if not path:
            return path
        if os.path.isabs(path) or self.project_root is None:
            return os.path.normpath(path)
        return os.path.normpath(os.path.join(self.project_root, path))

    def normalize(self, raw: RawRecord) -> Finding:
        start_raw = raw.start or RawPosition()
        start = _to_zero_based(start_raw)
        if raw.end is not None:
            end = _to_zero_based(raw.end)
        else:
            end = Position(line=start.line + 1, col=start.col)

        file = self._absolute(raw.path)
        rule_id = raw.check_id or _DEFAULT_RULE
        message = raw.extra.message or _DEFAULT_MESSAGE
        metadata = raw.extra.metadata

        return Finding(
            fingerprint=compute_fingerprint(file, rule_id, start.line, message),
            rule_id=rule_id,
            severity=coerce_severity(raw.extra.severity),
            file=file,
            rel_file=relative_path(file, self.project_root),
            range=Range(start=start, end=end),
            message=message,
            engine=ENGINE_SEMGREP,
            cwe=metadata.cwe,
            owasp=metadata.owasp,
        )

    def normalize_all(self, raws: Iterable[RawRecord]) -> list[Finding]:
        """Normalize in input order, dropping repeated fingerprints."""
        seen: set[str] = set()
        findings: list[Finding] = []
        for raw in raws:
            finding = self.normalize(raw)
            if finding.fingerprint in seen:
                continue
            seen.add(finding.fingerprint)
            findings.append(finding)
        logger.debug("Normalized %d findings", len(findings))
        return findings
