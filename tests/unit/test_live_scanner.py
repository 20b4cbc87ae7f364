# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for live (per-file) scanning."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from vulnscan.core.exceptions import ScanExecutionFailedError
from vulnscan.diagnostics.registry import DiagnosticRegistry
from vulnscan.live.scanner import LiveScanner, collect_file_states, detect_changes
from vulnscan.models.raw import RawRecord
from vulnscan.scanner.cancellation import CancelToken


class FakeAdapter:
    """Reports one finding per scanned file, plus one in an unrelated file."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail = False

    async def invoke(self, files, configs, timeout_seconds, cancel_token=None):
        self.calls.append(list(files))
        if self.fail:
            raise ScanExecutionFailedError("semgrep exited with code 2", returncode=2)
        records = [
            RawRecord.model_validate(
                {
                    "check_id": "python.lang.security.audit.eval-detected",
                    "path": path,
                    "start": {"line": 3, "col": 5},
                    "end": {"line": 3, "col": 20},
                    "extra": {"severity": "ERROR", "message": "eval"},
                }
            )
            for path in files
        ]
        records.append(RawRecord.model_validate({"check_id": "other", "path": "/elsewhere/x.py"}))
        return records


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def live(adapter: FakeAdapter, tmp_path: Path) -> LiveScanner:
    return LiveScanner(
        adapter,
        DiagnosticRegistry(),
        ["p/python"],
        30,
        debounce_seconds=0.05,
        project_root=tmp_path,
    )


def _touch(path: Path, text: str = "x = 1\n") -> str:
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestScanDocument:
    async def test_publishes_only_the_scanned_file(self, live: LiveScanner, tmp_path: Path) -> None:
        file = _touch(tmp_path / "app.py")
        published: list[tuple[str, int]] = []
        live.on_publish = lambda f, items: published.append((f, len(items)))

        findings = await live.scan_document(file)

        assert [f.file for f in findings] == [file]
        assert findings[0].range.start.line == 2
        assert live.registry.files() == [file]
        assert published == [(file, 1)]

    async def test_unsupported_extension_skipped(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        assert await live.scan_document(_touch(tmp_path / "notes.txt")) == []
        assert adapter.calls == []

    async def test_failure_keeps_previous_entry(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        file = _touch(tmp_path / "app.py")
        await live.scan_document(file)

        adapter.fail = True
        assert await live.scan_document(file) == []

        assert len(live.registry.get(file)) == 1


class TestScheduling:
    async def test_debounce_collapses_rapid_edits(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        file = _touch(tmp_path / "app.py")

        for _ in range(3):
            live.schedule(file)
        assert live.pending == [file]
        await live.drain()

        assert adapter.calls == [[file]]
        assert live.pending == []
        assert file in live.registry

    async def test_paths_debounce_independently(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        first = _touch(tmp_path / "a.py")
        second = _touch(tmp_path / "b.py")

        live.schedule(first)
        live.schedule(second)
        await live.drain()

        assert sorted(call[0] for call in adapter.calls) == [first, second]

    async def test_forget_cancels_and_clears(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        file = _touch(tmp_path / "app.py")
        await live.scan_document(file)
        live.schedule(file, delay=5)

        live.forget(file)
        await asyncio.sleep(0)

        assert file not in live.registry
        assert live.pending == []
        assert len(adapter.calls) == 1

    async def test_close_cancels_pending(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        live.schedule(_touch(tmp_path / "app.py"), delay=5)
        await live.close()
        assert live.pending == []
        assert adapter.calls == []


class TestFileStates:
    def test_collect_respects_extensions_and_excludes(self, tmp_path: Path) -> None:
        root = tmp_path.resolve()
        _touch(root / "app.py")
        _touch(root / "README.md")
        (root / "node_modules").mkdir()
        _touch(root / "node_modules" / "dep.js")

        states = collect_file_states(root)

        assert list(states) == [str(root / "app.py")]

    def test_collect_excludes_match_enumerator_paths(self, tmp_path: Path) -> None:
        # Relative excludes resolve against the root; same-named nested dirs stay.
        root = tmp_path.resolve()
        (root / "src" / "vendor").mkdir(parents=True)
        (root / "lib" / "build").mkdir(parents=True)
        (root / "build").mkdir()
        _touch(root / "src" / "vendor" / "dep.py")
        _touch(root / "build" / "out.py")
        kept = _touch(root / "lib" / "build" / "gen.py")

        states = collect_file_states(root, excludes=["src/vendor", "build"])

        assert list(states) == [kept]

    def test_collect_missing_root(self, tmp_path: Path) -> None:
        assert collect_file_states(tmp_path / "missing") == {}

    def test_detect_changes(self) -> None:
        previous = {"/a.py": 1.0, "/b.py": 1.0, "/gone.py": 1.0}
        current = {"/a.py": 1.0, "/b.py": 2.0, "/new.py": 1.0}

        changed, removed = detect_changes(previous, current)

        assert changed == ["/b.py", "/new.py"]
        assert removed == ["/gone.py"]


class TestWatch:
    async def test_new_file_is_scanned_until_cancelled(
        self, live: LiveScanner, adapter: FakeAdapter, tmp_path: Path
    ) -> None:
        root = tmp_path.resolve()
        token = CancelToken()
        task = asyncio.create_task(live.watch(root, poll_interval=0.02, cancel_token=token))
        await asyncio.sleep(0.1)

        file = _touch(root / "fresh.py")
        for _ in range(200):
            if file in live.registry:
                break
            await asyncio.sleep(0.02)

        token.cancel()
        await asyncio.wait_for(task, timeout=2)

        assert file in live.registry
        assert os.path.basename(adapter.calls[0][0]) == "fresh.py"
        assert live.pending == []
