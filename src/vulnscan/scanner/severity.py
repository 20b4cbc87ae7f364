# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Severity ranking, filtering, and deterministic ordering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from vulnscan.core.constants import SEVERITY_RANK, Severity


class _Ranked(Protocol):
    @property
    def severity(self) -> Severity: ...

    @property
    def rel_file(self) -> str: ...


T = TypeVar("T", bound=_Ranked)


def rank(severity: Severity | str) -> int:
    return SEVERITY_RANK[Severity(severity)]


def passes_threshold(item: _Ranked, threshold: Severity | str) -> bool:
    return rank(item.severity) >= rank(threshold)


def filter_by_severity(items: Iterable[T], threshold: Severity | str) -> list[T]:
    """Keep items whose severity rank is at or above *threshold*."""
    minimum = rank(threshold)
    return [item for item in items if rank(item.severity) >= minimum]


def sort_findings(items: Iterable[T]) -> list[T]:
    """Order by relative path, then most severe first."""
    return sorted(items, key=lambda i: (i.rel_file, -rank(i.severity)))


def highest_severity(items: Sequence[_Ranked]) -> Severity | None:
    if not items:
        return None
    return max(items, key=lambda i: rank(i.severity)).severity


def count_by_severity(items: Iterable[_Ranked]) -> dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for item in items:
        counts[Severity(item.severity).value] += 1
    return counts
