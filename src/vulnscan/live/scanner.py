# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Live mode: debounced rescans of changed files, published per file."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from vulnscan.core.constants import DEFAULT_EXCLUDES, DEFAULT_EXTENSIONS
from vulnscan.core.exceptions import VulnscanError
from vulnscan.diagnostics.registry import DiagnosticRegistry
from vulnscan.models.finding import Finding
from vulnscan.scanner.cancellation import CancelToken
from vulnscan.scanner.enumerator import resolve_excludes
from vulnscan.scanner.normalize import Normalizer
from vulnscan.scanner.semgrep import SemgrepAdapter

logger = logging.getLogger("vulnscan.live.scanner")

PublishCallback = Callable[[str, list[Finding]], None]


def collect_file_states(
    root: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excludes: Iterable[str] = DEFAULT_EXCLUDES,
) -> dict[str, float]:
    """Map every candidate file under *root* to its mtime."""
    allowed = frozenset(extensions)
    states: dict[str, float] = {}
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        return states
    skip = resolve_excludes(root_path, excludes)
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = [
            d
            for d in dirnames
            if os.path.normpath(os.path.realpath(os.path.join(dirpath, d))) not in skip
        ]
        for name in filenames:
            if os.path.splitext(name)[1] not in allowed:
                continue
            path = os.path.join(dirpath, name)
            with contextlib.suppress(OSError):
                states[path] = os.stat(path).st_mtime
    return states


def detect_changes(
    previous: dict[str, float],
    current: dict[str, float],
) -> tuple[list[str], list[str]]:
    """Return ``(changed, removed)`` paths between two snapshots.

    New files and files with a newer mtime count as changed.
    """
    changed = [
        path
        for path, mtime in current.items()
        if previous.get(path) is None or mtime > previous[path]
    ]
    removed = [path for path in previous if path not in current]
    return sorted(changed), sorted(removed)


class LiveScanner:
    """Rescans single files after edits settle and publishes their findings.

    Each path has at most one pending scan; scheduling the same path again
    restarts its debounce delay. The registry entry for a path is written
    only by the most recent scan of that path.
    """

    def __init__(
        self,
        adapter: SemgrepAdapter,
        registry: DiagnosticRegistry,
        configs: Sequence[str],
        timeout_seconds: int,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        debounce_seconds: float = 0.8,
        project_root: str | Path | None = None,
        on_publish: PublishCallback | None = None,
    ) -> None:
        self.adapter = adapter
        self.registry = registry
        self.configs = list(configs)
        self.timeout_seconds = timeout_seconds
        self.extensions = frozenset(extensions)
        self.debounce_seconds = debounce_seconds
        self._normalizer = Normalizer(project_root)
        self.on_publish = on_publish
        self._pending: dict[str, asyncio.Task[None]] = {}

    def accepts(self, path: str) -> bool:
        return os.path.splitext(path)[1] in self.extensions

    def schedule(self, path: str, delay: float | None = None) -> None:
        """Queue a debounced scan of *path*, replacing any pending one."""
        file = os.path.abspath(path)
        if not self.accepts(file):
            return
        previous = self._pending.pop(file, None)
        if previous is not None and not previous.done():
            previous.cancel()
        wait = self.debounce_seconds if delay is None else delay
        self._pending[file] = asyncio.create_task(self._scan_later(file, wait))

    async def _scan_later(self, file: str, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.scan_document(file)
        finally:
            if self._pending.get(file) is asyncio.current_task():
                del self._pending[file]

    async def scan_document(self, path: str) -> list[Finding]:
        """Scan one file now and publish its findings.

        Scan failures are logged and leave the previous entry untouched.
        """
        file = os.path.abspath(path)
        if not self.accepts(file):
            return []
        try:
            records = await self.adapter.invoke([file], self.configs, self.timeout_seconds)
        except VulnscanError as exc:
            logger.warning("[live] scan error for %s: %s", file, exc)
            return []

        findings = [f for f in self._normalizer.normalize_all(records) if f.file == file]
        self.registry.replace(file, findings)
        logger.info("[live] %s: %d findings", file, len(findings))
        if self.on_publish is not None:
            self.on_publish(file, findings)
        return findings

    def forget(self, path: str) -> None:
        """Drop the findings of a closed or deleted file."""
        file = os.path.abspath(path)
        pending = self._pending.pop(file, None)
        if pending is not None and not pending.done():
            pending.cancel()
        self.registry.replace(file, [])

    @property
    def pending(self) -> list[str]:
        return sorted(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled scan to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

    async def close(self) -> None:
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def watch(
        self,
        root: str | Path,
        poll_interval: float = 2.0,
        cancel_token: CancelToken | None = None,
        excludes: Iterable[str] = DEFAULT_EXCLUDES,
    ) -> None:
        """Poll *root* for changed files until *cancel_token* fires."""
        exclude_list = list(excludes)
        states = await asyncio.to_thread(
            collect_file_states, root, self.extensions, exclude_list
        )
        logger.info("[live] watching %d files under %s", len(states), root)
        try:
            while cancel_token is None or not cancel_token.is_cancelled:
                if cancel_token is not None:
                    with contextlib.suppress(TimeoutError):
                        await asyncio.wait_for(cancel_token.wait(), timeout=poll_interval)
                    if cancel_token.is_cancelled:
                        break
                else:
                    await asyncio.sleep(poll_interval)

                current = await asyncio.to_thread(
                    collect_file_states, root, self.extensions, exclude_list
                )
                changed, removed = detect_changes(states, current)
                for path in changed:
                    self.schedule(path)
                for path in removed:
                    self.forget(path)
                states = current
        finally:
            await self.close()
