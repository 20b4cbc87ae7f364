# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Sequential batch dispatch of files to the scanner."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

from vulnscan.core.exceptions import ScanExecutionFailedError
from vulnscan.models.scan import BatchRunResult, ScanBatch
from vulnscan.scanner.cancellation import CancelToken
from vulnscan.scanner.semgrep import SemgrepAdapter

logger = logging.getLogger("vulnscan.scanner.batcher")

ProgressCallback = Callable[[int, int], None]


def split_batches(
    files: Sequence[str],
    batch_size: int,
    configs: Sequence[str] = (),
    timeout_seconds: int = 60,
) -> list[ScanBatch]:
    """Split *files* into ``ceil(n / batch_size)`` contiguous batches."""
    size = max(1, batch_size)
    count = math.ceil(len(files) / size)
    return [
        ScanBatch(
            index=i,
            paths=tuple(files[i * size : (i + 1) * size]),
            configs=tuple(configs),
            timeout_seconds=timeout_seconds,
        )
        for i in range(count)
    ]


class ScanBatcher:
    """Runs one scanner process at a time over consecutive batches.

    The scanner is itself multi-threaded, so batches never overlap.
    """

    def __init__(self, adapter: SemgrepAdapter) -> None:
        self._adapter = adapter

    async def run(
        self,
        files: Sequence[str],
        batch_size: int,
        configs: Sequence[str],
        timeout_seconds: int,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancelToken | None = None,
    ) -> BatchRunResult:
        """Scan *files* batch by batch and accumulate raw records.

        Cancellation stops the run before the next batch and returns what
        has been collected. A failing batch aborts the run with a
        :class:`ScanExecutionFailedError` carrying the partial records.
        """
        batches = split_batches(files, batch_size, configs, timeout_seconds)
        total = len(files)
        result = BatchRunResult(batches_total=len(batches))

        for batch in batches:
            if cancel_token is not None and cancel_token.is_cancelled:
                result.cancelled = True
                logger.info(
                    "Scan cancelled before batch %d/%d (%d/%d files done)",
                    batch.index + 1,
                    len(batches),
                    result.files_processed,
                    total,
                )
                break

            try:
                records = await self._adapter.invoke(
                    list(batch.paths),
                    list(batch.configs),
                    batch.timeout_seconds,
                    cancel_token=cancel_token,
                )
            except ScanExecutionFailedError as exc:
                raise ScanExecutionFailedError(
                    f"Batch {batch.index + 1}/{len(batches)} failed after "
                    f"{result.files_processed}/{total} files: {exc}",
                    stderr=exc.stderr,
                    returncode=exc.returncode,
                    timed_out=exc.timed_out,
                    batch_index=batch.index,
                    files_processed=result.files_processed,
                    partial=result.records,
                ) from exc

            if cancel_token is not None and cancel_token.is_cancelled:
                # The in-flight process was terminated; its batch is incomplete.
                result.cancelled = True
                break

            result.records.extend(records)
            result.batches_completed += 1
            result.files_processed += len(batch.paths)
            logger.info(
                "Batch %d: files=%d, semgrepResults=%d",
                batch.index + 1,
                len(batch.paths),
                len(records),
            )
            if on_progress is not None:
                on_progress(result.files_processed, total)

        return result
