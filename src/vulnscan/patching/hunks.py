# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unified-diff hunk parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_FILE_HEADERS_RE = re.compile(r"^---.*?\n\+\+\+.*?(\n|$)", re.MULTILINE | re.DOTALL)


class LineKind(StrEnum):
    CONTEXT = " "
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True, slots=True)
class HunkLine:
    kind: LineKind
    text: str


@dataclass(slots=True)
class Hunk:
    """One ``@@ -a,b +c,d @@`` region of a unified diff."""

    old_start: int
    old_line_count: int
    new_start: int
    new_line_count: int
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def old_lines(self) -> list[str]:
        """Context and removed lines: the block expected in the current text."""
        return [line.text for line in self.lines if line.kind != LineKind.ADDED]

    @property
    def new_lines(self) -> list[str]:
        """Context and added lines: the replacement block."""
        return [line.text for line in self.lines if line.kind != LineKind.REMOVED]

    @property
    def old_text(self) -> str:
        return "\n".join(self.old_lines)

    @property
    def new_text(self) -> str:
        return "\n".join(self.new_lines)


def has_file_headers(diff: str) -> bool:
    """True when *diff* carries ``---``/``+++`` headers followed by a hunk."""
    match = _FILE_HEADERS_RE.search(diff)
    return match is not None and "@@" in diff[match.end() :]


def parse_hunks(diff: str) -> list[Hunk]:
    """Parse every hunk of *diff*.

    Missing counts default to 1. A body ends at the next ``@@`` header or
    at a ``---``/``+++`` file header pair. Empty lines inside a body are
    blank context lines; other unprefixed lines (``\\ No newline at end of
    file``) are ignored.
    """
    lines = diff.replace("\r\n", "\n").rstrip("\n").split("\n")
    hunks: list[Hunk] = []
    current: Hunk | None = None

    for i, line in enumerate(lines):
        if line.startswith("@@"):
            match = _HUNK_HEADER_RE.match(line)
            if match is None:
                current = None
                continue
            old_start, old_count, new_start, new_count = match.groups()
            current = Hunk(
                old_start=int(old_start),
                old_line_count=int(old_count) if old_count is not None else 1,
                new_start=int(new_start),
                new_line_count=int(new_count) if new_count is not None else 1,
            )
            hunks.append(current)
            continue

        if current is None:
            continue
        if line.startswith("--- ") and i + 1 < len(lines) and lines[i + 1].startswith("+++ "):
            current = None
            continue
        if not line:
            current.lines.append(HunkLine(kind=LineKind.CONTEXT, text=""))
        elif line[0] in ("+", "-", " "):
            current.lines.append(HunkLine(kind=LineKind(line[0]), text=line[1:]))

    return hunks
