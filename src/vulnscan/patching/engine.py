# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Apply unified diffs to file content.

Two strategies are tried in order. :class:`SnippetReplaceStrategy` swaps a
single hunk's old block for its new block by substring match, which is
robust to line drift between scan and apply. :class:`PositionalStrategy`
slices hunks in by line number while tracking the offset introduced by
earlier hunks. Either the whole diff applies or nothing changes.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from vulnscan.core.exceptions import PatchApplyFailedError
from vulnscan.patching.hunks import Hunk, has_file_headers, parse_hunks

logger = logging.getLogger("vulnscan.patching.engine")

STRATEGY_SNIPPET = "snippet"
STRATEGY_POSITIONAL = "positional"


@dataclass(frozen=True, slots=True)
class PatchOutcome:
    """Result of one apply attempt. ``text`` is set only when ``ok``."""

    ok: bool
    text: str | None = None
    strategy: str | None = None
    reason: str = ""
    hunk_index: int | None = None
    ambiguous: bool = False

    @classmethod
    def failure(
        cls,
        reason: str,
        *,
        strategy: str | None = None,
        hunk_index: int | None = None,
        ambiguous: bool = False,
    ) -> PatchOutcome:
        return cls(
            ok=False,
            strategy=strategy,
            reason=reason,
            hunk_index=hunk_index,
            ambiguous=ambiguous,
        )

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise PatchApplyFailedError(self.reason, hunk_index=self.hunk_index)


class SnippetReplaceStrategy:
    """Whole-text substring replace for single-hunk diffs with file headers."""

    name = STRATEGY_SNIPPET

    def apply(
        self,
        text: str,
        diff: str,
        hunks: list[Hunk],
        snippet: str | None = None,
    ) -> PatchOutcome:
        if len(hunks) != 1 or not has_file_headers(diff):
            return PatchOutcome.failure("not a single-hunk diff with file headers", strategy=self.name)

        hunk = hunks[0]
        old_block = hunk.old_text
        needle = old_block.strip()
        if not needle:
            return PatchOutcome.failure("empty old block", strategy=self.name, hunk_index=0)
        if needle not in (snippet or "") and needle not in text:
            return PatchOutcome.failure("old block not found", strategy=self.name, hunk_index=0)

        occurrences = text.count(old_block)
        if occurrences == 0:
            return PatchOutcome.failure(
                "old block not found verbatim", strategy=self.name, hunk_index=0
            )
        if occurrences > 1:
            return PatchOutcome.failure(
                f"old block occurs {occurrences} times",
                strategy=self.name,
                hunk_index=0,
                ambiguous=True,
            )

        new_text = text.replace(old_block, hunk.new_text, 1)
        if new_text == text:
            return PatchOutcome.failure("replacement is a no-op", strategy=self.name, hunk_index=0)
        return PatchOutcome(ok=True, text=new_text, strategy=self.name)


class PositionalStrategy:
    """Line-number slice replace with cumulative offset tracking.

    With ``verify`` set, each target block must equal the hunk's old lines.
    """

    name = STRATEGY_POSITIONAL

    def __init__(self, verify: bool = False) -> None:
        self.verify = verify

    def apply(
        self,
        text: str,
        diff: str,
        hunks: list[Hunk],
        snippet: str | None = None,
    ) -> PatchOutcome:
        if not hunks:
            return PatchOutcome.failure("diff contains no hunks", strategy=self.name)

        lines = text.split("\n")
        offset = 0
        for index, hunk in enumerate(hunks):
            start = max(0, hunk.old_start - 1 + offset)
            end = start + hunk.old_line_count
            if start >= len(lines) or end > len(lines):
                return PatchOutcome.failure(
                    f"hunk {index + 1} targets lines {start + 1}-{end} beyond end of file "
                    f"({len(lines)} lines)",
                    strategy=self.name,
                    hunk_index=index,
                )

            block = lines[start:end]
            if not "\n".join(block).strip():
                return PatchOutcome.failure(
                    f"hunk {index + 1} targets an empty block", strategy=self.name, hunk_index=index
                )
            if self.verify and block != hunk.old_lines:
                return PatchOutcome.failure(
                    f"hunk {index + 1} does not match the current content",
                    strategy=self.name,
                    hunk_index=index,
                )

            lines[start:end] = hunk.new_lines
            offset += hunk.new_line_count - hunk.old_line_count

        return PatchOutcome(ok=True, text="\n".join(lines), strategy=self.name)


class PatchEngine:
    """Apply a unified diff to text or to a file on disk."""

    def __init__(self) -> None:
        self.snippet_strategy = SnippetReplaceStrategy()
        self.positional_strategy = PositionalStrategy()

    def apply(self, text: str, diff: str, snippet: str | None = None) -> PatchOutcome:
        """Return the patched text, or a failure describing the failing hunk.

        CRLF line endings and a trailing newline in *text* are preserved.
        """
        hunks = parse_hunks(diff)
        if not hunks:
            return PatchOutcome.failure("diff contains no hunks")

        crlf = "\r\n" in text
        body = text.replace("\r\n", "\n") if crlf else text
        trailing_newline = body.endswith("\n")
        if trailing_newline:
            body = body[:-1]

        outcome = self.snippet_strategy.apply(body, diff, hunks, snippet)
        if not outcome.ok:
            logger.debug("Snippet strategy skipped: %s", outcome.reason)
            positional = PositionalStrategy(verify=True) if outcome.ambiguous else self.positional_strategy
            outcome = positional.apply(body, diff, hunks, snippet)
        if not outcome.ok or outcome.text is None:
            logger.warning("Patch not applied: %s", outcome.reason)
            return outcome

        patched = outcome.text
        if trailing_newline:
            patched += "\n"
        if crlf:
            patched = patched.replace("\n", "\r\n")
        return PatchOutcome(ok=True, text=patched, strategy=outcome.strategy)

    async def apply_to_file(
        self,
        path: str | Path,
        diff: str,
        snippet: str | None = None,
    ) -> PatchOutcome:
        """Patch *path* in place. The file is only rewritten on success."""
        target = Path(path).resolve()
        try:
            async with aiofiles.open(target, encoding="utf-8", newline="") as f:
                text = await f.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read %s for patching: %s", target, exc)
            return PatchOutcome.failure(f"cannot read {target}: {exc}")

        outcome = self.apply(text, diff, snippet)
        if not outcome.ok or outcome.text is None:
            return outcome

        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        os.close(fd)
        try:
            async with aiofiles.open(tmp_name, "w", encoding="utf-8", newline="") as f:
                await f.write(outcome.text)
            os.chmod(tmp_name, stat.S_IMODE(target.stat().st_mode))
            os.replace(tmp_name, target)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.warning("Cannot write patched %s: %s", target, exc)
            return PatchOutcome.failure(f"cannot write {target}: {exc}", strategy=outcome.strategy)

        logger.info("Applied patch to %s (%s strategy)", target, outcome.strategy)
        return outcome
