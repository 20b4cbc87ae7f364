# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Structured-output enrichment of findings through the Anthropic API."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from vulnscan.core.config import Settings, get_settings
from vulnscan.core.exceptions import EnrichmentUnparseableError, LLMError
from vulnscan.enrichment.parser import EnrichmentResponse, parse_enrichment_response
from vulnscan.enrichment.prompts import (
    ENRICHMENT_SCHEMA,
    SYSTEM_PROMPT,
    TOOL_NAME,
    build_user_prompt,
)
from vulnscan.models.finding import Finding

logger = logging.getLogger("vulnscan.enrichment.client")


class EnrichmentClient:
    """Asks the model to calibrate, explain, and propose a fix for one finding.

    The model is forced to answer through a single tool whose input schema
    is the enrichment schema, so the tool input is the structured output.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self._settings.anthropic_api_key)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self._settings.anthropic_api_key:
                raise LLMError("Anthropic API key not configured (VULNSCAN_ANTHROPIC_API_KEY)")
            self._client = anthropic.AsyncAnthropic(api_key=self._settings.anthropic_api_key)
        return self._client

    async def enrich(
        self,
        language_tag: str,
        finding: Finding,
        output_language: str,
    ) -> EnrichmentResponse:
        """Return the validated enrichment for *finding*.

        Raises :class:`LLMError` on transport failures and
        :class:`EnrichmentUnparseableError` when the answer does not fit
        the schema.
        """
        settings = self._settings
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=settings.llm_model,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
                system=SYSTEM_PROMPT,
                tools=[
                    {
                        "name": TOOL_NAME,
                        "description": "Record the calibrated assessment of the finding.",
                        "input_schema": ENRICHMENT_SCHEMA,
                    }
                ],
                tool_choice={"type": "tool", "name": TOOL_NAME},
                messages=[
                    {
                        "role": "user",
                        "content": build_user_prompt(language_tag, finding, output_language),
                    }
                ],
            )
        except anthropic.APIError as exc:
            raise LLMError(f"Anthropic API error during enrichment: {exc}") from exc

        tool_input: dict[str, Any] | None = None
        response_text = ""
        for block in response.content:
            if block.type == "tool_use" and block.name == TOOL_NAME:
                tool_input = dict(block.input)
            elif block.type == "text":
                response_text += block.text

        if tool_input is not None:
            return parse_enrichment_response(tool_input)
        if response_text:
            return parse_enrichment_response(response_text)
        raise EnrichmentUnparseableError(
            f"Enrichment returned no content for {finding.rule_id} @ {finding.rel_file}"
        )
