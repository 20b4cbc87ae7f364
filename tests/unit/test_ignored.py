# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the false-positive store."""

from __future__ import annotations

import json
from pathlib import Path

from vulnscan.storage.ignored import IgnoreStore


class TestIgnoreStore:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = IgnoreStore(tmp_path / "nope" / "ignored.json")
        assert store.load() == set()
        assert not store.is_ignored("abc")

    def test_toggle_persists_sorted_array(self, tmp_path: Path) -> None:
        path = tmp_path / ".vulnscan" / "ignored.json"
        store = IgnoreStore(path)

        assert store.toggle("bbb") is True
        assert store.toggle("aaa") is True

        assert json.loads(path.read_text(encoding="utf-8")) == ["aaa", "bbb"]
        assert IgnoreStore(path).is_ignored("bbb")

    def test_toggle_twice_restores(self, tmp_path: Path) -> None:
        path = tmp_path / "ignored.json"
        store = IgnoreStore(path)

        store.toggle("abc")
        assert store.toggle("abc") is False

        assert not store.is_ignored("abc")
        assert json.loads(path.read_text(encoding="utf-8")) == []

    def test_corrupt_file_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "ignored.json"
        path.write_text("{not json", encoding="utf-8")
        assert IgnoreStore(path).load() == set()

    def test_non_array_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "ignored.json"
        path.write_text('{"abc": true}', encoding="utf-8")
        assert IgnoreStore(path).load() == set()

    def test_non_string_entries_dropped(self, tmp_path: Path) -> None:
        path = tmp_path / "ignored.json"
        path.write_text('["abc", 1, null, ""]', encoding="utf-8")
        assert IgnoreStore(path).load() == {"abc"}

    def test_filter(self, tmp_path: Path, finding_factory) -> None:
        keep = finding_factory(line=1)
        drop = finding_factory(line=2)
        store = IgnoreStore(tmp_path / "ignored.json")
        store.toggle(drop.fingerprint)

        assert store.filter([keep, drop]) == [keep]

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        store = IgnoreStore(tmp_path / "ignored.json")
        store.toggle("abc")
        assert [p.name for p in tmp_path.iterdir()] == ["ignored.json"]
