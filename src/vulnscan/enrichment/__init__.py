# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Finding enrichment through a rate-limited structured-output AI service."""

from vulnscan.enrichment.client import EnrichmentClient
from vulnscan.enrichment.limiter import ConcurrencyLimiter, run_all
from vulnscan.enrichment.parser import EnrichmentResponse, parse_enrichment_response
from vulnscan.enrichment.runner import enrich_findings

__all__ = [
    "ConcurrencyLimiter",
    "EnrichmentClient",
    "EnrichmentResponse",
    "enrich_findings",
    "parse_enrichment_response",
    "run_all",
]
