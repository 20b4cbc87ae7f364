# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Validate enrichment responses against the fixed schema."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from vulnscan.core.constants import MAX_ENRICH_LIST_ITEMS, CalibratedSeverity
from vulnscan.core.exceptions import EnrichmentUnparseableError
from vulnscan.models.finding import EnrichedFinding, Finding

logger = logging.getLogger("vulnscan.enrichment.parser")

# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class EnrichmentFix(BaseModel):
    type: Literal["none", "diff"]
    unified_diff: str | None


class EnrichmentResponse(BaseModel):
    """The structured response of the enrichment service."""

    rule_id: str
    cwe: str | None
    owasp: str | None
    severity_calibrated: CalibratedSeverity
    confidence: float = Field(ge=0.0, le=1.0)
    explanation_md: str
    fix: EnrichmentFix
    tests_suggested: list[str]
    references: list[str]

    @field_validator("cwe", "owasp", mode="before")
    @classmethod
    def _join_lists(cls, v: object) -> object:
        if isinstance(v, list):
            return ", ".join(str(item) for item in v) or None
        return v

    @field_validator("tests_suggested", "references", mode="after")
    @classmethod
    def _truncate(cls, v: list[str]) -> list[str]:
        return v[:MAX_ENRICH_LIST_ITEMS]


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def _extract_json_object(response_text: str) -> Any:
    text = response_text.strip()

    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    if not text.startswith("{"):
        start = text.find("{")
        if start == -1:
            raise EnrichmentUnparseableError(
                f"No JSON object found in enrichment response: {response_text[:200]}"
            )
        text = text[start:]

    end = text.rfind("}")
    if end == -1:
        raise EnrichmentUnparseableError(
            f"No closing brace found in enrichment response: {response_text[:200]}"
        )

    try:
        return json.loads(text[: end + 1])
    except json.JSONDecodeError as exc:
        raise EnrichmentUnparseableError(f"Invalid JSON in enrichment response: {exc}") from exc


def parse_enrichment_response(payload: str | dict[str, Any]) -> EnrichmentResponse:
    """Parse a tool input dict or response text into an :class:`EnrichmentResponse`.

    Text may be raw JSON, JSON wrapped in markdown fences, or JSON
    surrounded by prose.
    """
    data = payload if isinstance(payload, dict) else _extract_json_object(payload)
    try:
        return EnrichmentResponse.model_validate(data)
    except ValidationError as exc:
        raise EnrichmentUnparseableError(
            f"Enrichment response does not match expected schema: {exc}"
        ) from exc


def to_enriched(finding: Finding, response: EnrichmentResponse) -> EnrichedFinding:
    """Attach a validated response to its finding."""
    diff = response.fix.unified_diff if response.fix.type == "diff" else None
    return EnrichedFinding(
        finding=finding,
        calibrated_severity=response.severity_calibrated,
        confidence=response.confidence,
        explanation=response.explanation_md,
        unified_diff=diff or None,
        suggested_tests=list(response.tests_suggested),
        references=list(response.references),
        cwe=response.cwe or finding.cwe,
        owasp=response.owasp or finding.owasp,
    )
