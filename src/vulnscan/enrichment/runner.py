# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fan findings out to the enrichment service with per-item isolation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from vulnscan.enrichment.client import EnrichmentClient
from vulnscan.enrichment.limiter import run_all
from vulnscan.enrichment.parser import to_enriched
from vulnscan.enrichment.prompts import detect_language
from vulnscan.models.finding import EnrichedFinding, Finding
from vulnscan.scanner.cancellation import CancelToken

logger = logging.getLogger("vulnscan.enrichment.runner")


async def enrich_findings(
    findings: Sequence[Finding],
    client: EnrichmentClient,
    *,
    concurrency: int = 3,
    output_language: str = "en",
    cancel_token: CancelToken | None = None,
) -> list[EnrichedFinding]:
    """Enrich every finding, never dropping one.

    Returns one item per input, in input order. A failed call (or one never
    started because of cancellation) yields the un-enriched item.
    """
    results: list[EnrichedFinding | None] = [None] * len(findings)
    total = len(findings)

    def make_task(idx: int, finding: Finding):
        async def task() -> None:
            location = f"{finding.rel_file}:{finding.range.start.line + 1}"
            logger.info("[%d/%d] Enriching %s @ %s", idx + 1, total, finding.rule_id, location)
            try:
                response = await client.enrich(
                    detect_language(finding.file), finding, output_language
                )
            except Exception as exc:
                logger.error("Enrichment failed for %s @ %s: %s", finding.rule_id, location, exc)
                results[idx] = EnrichedFinding.unenriched(finding)
                return
            results[idx] = to_enriched(finding, response)

        return task

    await run_all(
        [make_task(idx, f) for idx, f in enumerate(findings)],
        concurrency,
        cancel_token=cancel_token,
    )

    enriched = [
        item if item is not None else EnrichedFinding.unenriched(findings[idx])
        for idx, item in enumerate(results)
    ]
    logger.info(
        "Enriched %d/%d findings",
        sum(1 for item in enriched if item.is_enriched),
        total,
    )
    return enriched
