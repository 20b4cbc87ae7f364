# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Source context extraction around a finding."""

from __future__ import annotations

import logging

import aiofiles

from vulnscan.models.finding import Range

logger = logging.getLogger("vulnscan.scanner.snippet")

DEFAULT_PAD = 80


async def get_snippet(file: str, range_: Range, pad: int = DEFAULT_PAD) -> str:
    """Return the lines around *range_*, ``pad // 2`` on each side.

    Read errors yield an empty string.
    """
    try:
        async with aiofiles.open(file, encoding="utf-8", errors="replace") as fh:
            text = await fh.read()
    except OSError as exc:
        logger.debug("Cannot read snippet from %s: %s", file, exc)
        return ""

    lines = text.split("\n")
    start = max(0, range_.start.line - pad // 2)
    end = min(len(lines) - 1, range_.end.line + pad // 2)
    return "\n".join(lines[start : end + 1])
