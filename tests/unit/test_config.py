# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from vulnscan.core.config import Settings
from vulnscan.core.constants import (
    DEFAULT_EXCLUDES,
    DEFAULT_SEMGREP_CONFIGS,
    Severity,
    TargetDirectory,
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.semgrep_configs == list(DEFAULT_SEMGREP_CONFIGS)
        assert settings.exclude_dirs == list(DEFAULT_EXCLUDES)
        assert settings.target_directory == TargetDirectory.AUTO
        assert settings.batch_size == 60
        assert settings.timeout_sec == 60
        assert settings.min_severity == Severity.LOW

    def test_clamping(self) -> None:
        settings = Settings(batch_size=3, timeout_sec=1, enrich_concurrency=50)
        assert settings.batch_size == 10
        assert settings.timeout_sec == 10
        assert settings.enrich_concurrency == 8

    def test_concurrency_floor(self) -> None:
        assert Settings(enrich_concurrency=0).enrich_concurrency == 1

    def test_csv_lists_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VULNSCAN_SEMGREP_CONFIGS", "p/python, p/secrets,,")
        monkeypatch.setenv("VULNSCAN_EXCLUDE_DIRS", "node_modules,.venv")
        settings = Settings()
        assert settings.semgrep_configs == ["p/python", "p/secrets"]
        assert settings.exclude_dirs == ["node_modules", ".venv"]

    def test_enum_fields_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VULNSCAN_TARGET_DIRECTORY", "app")
        monkeypatch.setenv("VULNSCAN_MIN_SEVERITY", "high")
        settings = Settings()
        assert settings.target_directory == TargetDirectory.APP
        assert settings.min_severity == Severity.HIGH

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("VULNSCAN_BATCH_SIZE=25\n", encoding="utf-8")
        assert Settings().batch_size == 25

    def test_json_list_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VULNSCAN_ALLOWED_EXTENSIONS", '[".py", ".rb"]')
        assert Settings().allowed_extensions == [".py", ".rb"]
