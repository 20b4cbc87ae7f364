# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Public SDK interface for embedding vulnscan in other tools.

Usage::

    from vulnscan import scan, scan_sync

    # Synchronous (blocking)
    report = scan_sync("path/to/project", use_llm=False)
    print(report.status, report.highest_severity)

    # Async
    report = await scan("path/to/project", min_severity="high")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from vulnscan.core.config import Settings, get_settings
from vulnscan.core.constants import Severity
from vulnscan.models.scan import ScanReport
from vulnscan.patching.engine import PatchEngine, PatchOutcome
from vulnscan.scanner.batcher import ProgressCallback
from vulnscan.scanner.cancellation import CancelToken
from vulnscan.scanner.pipeline import ScanPipeline

logger = logging.getLogger("vulnscan.sdk")


def build_settings(
    settings: Settings | None,
    *,
    configs: Sequence[str] | None,
    min_severity: Severity | str | None,
    batch_size: int | None,
    timeout_sec: int | None,
) -> Settings:
    """Apply per-call overrides on top of *settings*.

    Overrides go through validation again so that clamping still applies.
    """
    base = settings or get_settings()
    overrides: dict[str, object] = {}
    if configs:
        overrides["semgrep_configs"] = list(configs)
    if min_severity is not None:
        overrides["min_severity"] = Severity(min_severity)
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if timeout_sec is not None:
        overrides["timeout_sec"] = timeout_sec
    if not overrides:
        return base
    return Settings.model_validate({**base.model_dump(), **overrides})


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------


async def scan(
    path: str | Path = ".",
    *,
    use_llm: bool = True,
    configs: Sequence[str] | None = None,
    min_severity: Severity | str | None = None,
    batch_size: int | None = None,
    timeout_sec: int | None = None,
    settings: Settings | None = None,
    cancel_token: CancelToken | None = None,
    on_progress: ProgressCallback | None = None,
) -> ScanReport:
    """Scan the workspace at *path* and return a :class:`ScanReport`.

    Parameters
    ----------
    path:
        Workspace root. The scanned directory is resolved from it
        according to ``target_directory``.
    use_llm:
        Set ``False`` to skip enrichment even when an API key is set.
    configs:
        Semgrep rule sets overriding the configured ones.
    min_severity:
        Lowest severity kept in the report.
    batch_size, timeout_sec:
        Per-call overrides, clamped like the settings.
    cancel_token:
        Cancels the scan cooperatively; the partial report is returned.
    """
    effective = build_settings(
        settings,
        configs=configs,
        min_severity=min_severity,
        batch_size=batch_size,
        timeout_sec=timeout_sec,
    )
    pipeline = ScanPipeline(settings=effective)
    return await pipeline.scan_workspace(
        path,
        cancel_token=cancel_token,
        on_progress=on_progress,
        enrich=use_llm,
    )


async def apply_patch(
    path: str | Path,
    diff: str,
    *,
    snippet: str | None = None,
) -> PatchOutcome:
    """Apply a unified *diff* to the file at *path*.

    The file is rewritten only when every hunk applies.
    """
    return await PatchEngine().apply_to_file(path, diff, snippet=snippet)


# ---------------------------------------------------------------------------
# Public sync wrappers
# ---------------------------------------------------------------------------


def scan_sync(
    path: str | Path = ".",
    *,
    use_llm: bool = True,
    configs: Sequence[str] | None = None,
    min_severity: Severity | str | None = None,
    batch_size: int | None = None,
    timeout_sec: int | None = None,
    settings: Settings | None = None,
) -> ScanReport:
    """Synchronous wrapper around :func:`scan`.

    Calls ``asyncio.run()`` internally, so it must **not** be called from
    within an already-running event loop.
    """
    return asyncio.run(
        scan(
            path,
            use_llm=use_llm,
            configs=configs,
            min_severity=min_severity,
            batch_size=batch_size,
            timeout_sec=timeout_sec,
            settings=settings,
        )
    )


def apply_patch_sync(
    path: str | Path,
    diff: str,
    *,
    snippet: str | None = None,
) -> PatchOutcome:
    """Synchronous wrapper around :func:`apply_patch`."""
    return asyncio.run(apply_patch(path, diff, snippet=snippet))
