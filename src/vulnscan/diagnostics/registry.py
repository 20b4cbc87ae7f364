# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-file registry of the most recently published findings."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from vulnscan.models.finding import Finding
from vulnscan.scanner.severity import sort_findings

logger = logging.getLogger("vulnscan.diagnostics.registry")


class DiagnosticRegistry:
    """Mapping of absolute file path to its current findings.

    :meth:`replace` and :meth:`clear` are the only mutators. The latest
    :meth:`replace` for a file wins; an empty list removes the file.
    """

    def __init__(self) -> None:
        self._by_file: dict[str, list[Finding]] = {}

    def replace(self, file: str, findings: Iterable[Finding]) -> None:
        items = list(findings)
        if items:
            self._by_file[file] = items
        else:
            self._by_file.pop(file, None)
        logger.debug("Registry: %s -> %d findings", file, len(items))

    def clear(self) -> None:
        self._by_file.clear()

    def publish(self, findings: Iterable[Finding]) -> None:
        """Replace the whole registry with *findings*, grouped by file."""
        grouped: dict[str, list[Finding]] = {}
        for finding in findings:
            grouped.setdefault(finding.file, []).append(finding)
        self.clear()
        for file, items in grouped.items():
            self.replace(file, items)

    def get(self, file: str) -> list[Finding]:
        return list(self._by_file.get(file, []))

    def files(self) -> list[str]:
        return sorted(self._by_file)

    def flatten(self) -> list[Finding]:
        """Every cached finding, in deterministic report order."""
        return sort_findings(f for items in self._by_file.values() for f in items)

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_file.values())

    def __contains__(self, file: object) -> bool:
        return file in self._by_file
