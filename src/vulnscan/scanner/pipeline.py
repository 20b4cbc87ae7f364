# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Workspace scan orchestrator: enumerate, batch scan, normalize, enrich."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from pathlib import Path

from vulnscan.core.config import Settings, get_settings
from vulnscan.core.constants import ScanStatus
from vulnscan.core.exceptions import ScanExecutionFailedError
from vulnscan.diagnostics.registry import DiagnosticRegistry
from vulnscan.enrichment.client import EnrichmentClient
from vulnscan.enrichment.prompts import resolve_output_language
from vulnscan.enrichment.runner import enrich_findings
from vulnscan.models.finding import EnrichedFinding, Finding
from vulnscan.models.raw import RawRecord
from vulnscan.models.scan import ScanReport
from vulnscan.scanner.batcher import ProgressCallback, ScanBatcher
from vulnscan.scanner.cancellation import CancelToken
from vulnscan.scanner.enumerator import FileEnumerator, resolve_target_root
from vulnscan.scanner.normalize import Normalizer
from vulnscan.scanner.semgrep import SemgrepAdapter
from vulnscan.scanner.severity import filter_by_severity, sort_findings
from vulnscan.scanner.snippet import get_snippet
from vulnscan.storage.ignored import IgnoreStore

logger = logging.getLogger("vulnscan.scanner.pipeline")


class ScanPipeline:
    """Runs a full workspace scan and produces an ordered :class:`ScanReport`.

    Stages run in order: target resolution, enumeration, batched scanning,
    normalization, ignore list, severity filter, snippets, publication to
    the registry, and enrichment when an API key is configured.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        adapter: SemgrepAdapter | None = None,
        enrichment_client: EnrichmentClient | None = None,
        registry: DiagnosticRegistry | None = None,
        ignore_store: IgnoreStore | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._adapter = adapter or SemgrepAdapter(binary=self._settings.semgrep_bin or None)
        self._enrichment_client = enrichment_client
        self.registry = registry if registry is not None else DiagnosticRegistry()
        self._ignore_store = ignore_store

    def _ignore_store_for(self, workspace_root: Path) -> IgnoreStore:
        if self._ignore_store is None:
            path = self._settings.ignore_file
            if not path.is_absolute():
                path = workspace_root / path
            self._ignore_store = IgnoreStore(path)
        return self._ignore_store

    def _enrichment_client_or_none(self) -> EnrichmentClient | None:
        if self._enrichment_client is None and self._settings.anthropic_api_key:
            self._enrichment_client = EnrichmentClient(settings=self._settings)
        if self._enrichment_client is not None and self._enrichment_client.available:
            return self._enrichment_client
        return None

    async def scan_workspace(
        self,
        workspace_root: str | Path,
        cancel_token: CancelToken | None = None,
        on_progress: ProgressCallback | None = None,
        enrich: bool = True,
    ) -> ScanReport:
        """Scan *workspace_root* and return the sorted report.

        Raises :class:`ToolNotFoundError` when no scanner binary is found.
        A failing batch yields a ``failed`` report built from the batches
        that completed; cancellation yields a ``cancelled`` one.
        """
        settings = self._settings
        root = Path(workspace_root).resolve()
        target_root = resolve_target_root(root, settings.target_directory)
        configs = list(settings.semgrep_configs)

        report = ScanReport(
            workspace_root=str(root),
            target_root=str(target_root),
            configs=configs,
            min_severity=settings.min_severity,
            status=ScanStatus.RUNNING,
        )
        start_time = time.monotonic()
        logger.info("Scanning %s (configs=%s)", target_root, ", ".join(configs))

        enumerator = FileEnumerator(
            excludes=settings.exclude_dirs,
            extensions=settings.allowed_extensions,
            max_size_kb=settings.max_file_size_kb,
        )
        tasks = await enumerator.enumerate(target_root, cancel_token=cancel_token)
        files = sorted(task.path for task in tasks)
        report.files_enumerated = len(files)

        records: list[RawRecord] = []
        if files:
            batcher = ScanBatcher(self._adapter)
            try:
                batch_result = await batcher.run(
                    files,
                    settings.batch_size,
                    configs,
                    settings.timeout_sec,
                    on_progress=on_progress,
                    cancel_token=cancel_token,
                )
                records = batch_result.records
                report.files_scanned = batch_result.files_processed
            except ScanExecutionFailedError as exc:
                logger.error("Scan failed: %s", exc)
                records = list(exc.partial)
                report.files_scanned = exc.files_processed
                report.errors.append(str(exc))
                report.status = ScanStatus.FAILED
        else:
            logger.info("No files to scan under %s", target_root)

        report.raw_count = len(records)
        findings = Normalizer(root).normalize_all(records)

        ignore_store = self._ignore_store_for(root)
        visible = ignore_store.filter(findings)
        report.ignored_count = len(findings) - len(visible)

        findings = filter_by_severity(visible, settings.min_severity)
        logger.info(
            "Findings: raw=%d, ignored=%d, >= %s: %d",
            report.raw_count,
            report.ignored_count,
            settings.min_severity,
            len(findings),
        )

        findings = [await self._with_snippet(f) for f in findings]
        self.registry.publish(findings)

        cancelled = cancel_token is not None and cancel_token.is_cancelled
        client = self._enrichment_client_or_none() if enrich else None
        if client is not None and findings and not cancelled:
            items = await enrich_findings(
                findings,
                client,
                concurrency=settings.enrich_concurrency,
                output_language=resolve_output_language(settings.enrich_language),
                cancel_token=cancel_token,
            )
        else:
            items = [EnrichedFinding.unenriched(f) for f in findings]

        report.items = sort_findings(items)
        if report.status != ScanStatus.FAILED:
            cancelled = cancel_token is not None and cancel_token.is_cancelled
            report.status = ScanStatus.CANCELLED if cancelled else ScanStatus.COMPLETED
        report.completed_at = datetime.now(UTC)
        report.duration_ms = int((time.monotonic() - start_time) * 1000)

        logger.info(
            "Scan of %s %s: findings=%d highest=%s duration=%dms",
            target_root,
            report.status,
            len(report.items),
            report.highest_severity,
            report.duration_ms,
        )
        return report

    @staticmethod
    async def _with_snippet(finding: Finding) -> Finding:
        snippet = await get_snippet(finding.file, finding.range)
        return finding.model_copy(update={"snippet": snippet or None})
