# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

import json
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from vulnscan.core.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_EXTENSIONS,
    DEFAULT_SEMGREP_CONFIGS,
    MAX_ENRICH_CONCURRENCY,
    MIN_BATCH_SIZE,
    MIN_TIMEOUT_SECONDS,
    Severity,
    TargetDirectory,
)

# List settings accept a JSON array or a comma-separated string.
CsvList = Annotated[list[str], NoDecode]


def _split_csv(v: object) -> list[str]:
    if isinstance(v, str):
        if v.lstrip().startswith("["):
            v = json.loads(v)
        else:
            return [item.strip() for item in v.split(",") if item.strip()]
    return [str(item) for item in v] if isinstance(v, (list, tuple)) else []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VULNSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Scanner
    semgrep_bin: str = ""
    semgrep_configs: CsvList = list(DEFAULT_SEMGREP_CONFIGS)
    target_directory: TargetDirectory = TargetDirectory.AUTO
    batch_size: int = 60
    timeout_sec: int = 60
    max_file_size_kb: int | None = None
    allowed_extensions: CsvList = list(DEFAULT_EXTENSIONS)
    exclude_dirs: CsvList = list(DEFAULT_EXCLUDES)
    min_severity: Severity = Severity.LOW

    @field_validator(
        "semgrep_configs", "allowed_extensions", "exclude_dirs", mode="before"
    )
    @classmethod
    def _parse_lists(cls, v: object) -> list[str]:
        return _split_csv(v)

    @field_validator("batch_size", mode="after")
    @classmethod
    def _clamp_batch_size(cls, v: int) -> int:
        return max(MIN_BATCH_SIZE, v)

    @field_validator("timeout_sec", mode="after")
    @classmethod
    def _clamp_timeout(cls, v: int) -> int:
        return max(MIN_TIMEOUT_SECONDS, v)

    # LLM enrichment (Anthropic)
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-6"
    llm_max_tokens: int = 2048
    llm_temperature: float = 0.0
    enrich_concurrency: int = 3
    enrich_language: str = "auto"

    @field_validator("enrich_concurrency", mode="after")
    @classmethod
    def _clamp_concurrency(cls, v: int) -> int:
        return min(MAX_ENRICH_CONCURRENCY, max(1, v))

    # Backend ingest
    backend_base_url: str = ""
    backend_token: str = ""
    backend_timeout: float = 15.0

    # False-positive list, relative to the workspace root unless absolute
    ignore_file: Path = Path(".vulnscan/ignored.json")

    # Live mode
    live_debounce_seconds: float = 0.8
    live_poll_interval: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"


def get_settings() -> Settings:
    return Settings()
