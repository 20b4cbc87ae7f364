# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unified-diff parsing and patch application."""

from vulnscan.patching.engine import (
    PatchEngine,
    PatchOutcome,
    PositionalStrategy,
    SnippetReplaceStrategy,
)
from vulnscan.patching.hunks import Hunk, HunkLine, LineKind, parse_hunks

__all__ = [
    "Hunk",
    "HunkLine",
    "LineKind",
    "PatchEngine",
    "PatchOutcome",
    "PositionalStrategy",
    "SnippetReplaceStrategy",
    "parse_hunks",
]
