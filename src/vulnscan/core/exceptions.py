# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for vulnscan."""

from __future__ import annotations

from typing import Any


class VulnscanError(Exception):
    """Base exception for all vulnscan errors."""


class ConfigurationError(VulnscanError):
    """Invalid or missing configuration."""


class ToolNotFoundError(VulnscanError):
    """No scanner binary candidate answered the version check."""

    def __init__(self, message: str, candidates: list[str] | None = None) -> None:
        super().__init__(message)
        self.candidates = list(candidates or [])


class ScanExecutionFailedError(VulnscanError):
    """The scanner ran but exited abnormally without parseable output.

    When raised by the batcher, batch_index and files_processed
    describe how far the run got and partial holds the raw records of
    the batches that completed before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        returncode: int | None = None,
        timed_out: bool = False,
        batch_index: int | None = None,
        files_processed: int = 0,
        partial: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode
        self.timed_out = timed_out
        self.batch_index = batch_index
        self.files_processed = files_processed
        self.partial = list(partial or [])


class MalformedOutputError(VulnscanError):
    """Scanner stdout was not the expected JSON document."""


class LLMError(VulnscanError):
    """Error communicating with the LLM API."""


class EnrichmentUnparseableError(LLMError):
    """The enrichment response did not match the expected schema."""


class PatchApplyFailedError(VulnscanError):
    """A unified diff could not be applied to the current file content."""

    def __init__(self, message: str, *, hunk_index: int | None = None) -> None:
        super().__init__(message)
        self.hunk_index = hunk_index


class UploadError(VulnscanError):
    """Uploading scans or findings to the backend failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
