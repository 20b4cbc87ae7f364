# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Recursive file enumeration with directory excludes and extension/size filters."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from vulnscan.core.constants import DEFAULT_EXCLUDES, DEFAULT_EXTENSIONS, TargetDirectory
from vulnscan.models.scan import FileTask
from vulnscan.scanner.cancellation import CancelToken

logger = logging.getLogger("vulnscan.scanner.enumerator")


def resolve_target_root(
    workspace_root: str | Path,
    target_directory: TargetDirectory | str = TargetDirectory.AUTO,
) -> Path:
    """Pick the directory to scan inside a workspace.

    ``app`` and ``auto`` prefer ``<workspace>/app`` when it exists and
    fall back to the workspace root otherwise.
    """
    root = Path(workspace_root).resolve()
    app_dir = root / "app"
    mode = TargetDirectory(target_directory)
    if mode == TargetDirectory.ROOT:
        return root
    if app_dir.is_dir():
        return app_dir
    if mode == TargetDirectory.APP:
        logger.warning('"app" does not exist in %s; scanning the root instead', root)
    return root


def resolve_excludes(root: Path, excludes: Iterable[str]) -> frozenset[str]:
    """Resolve exclude entries to real paths; relative entries hang off *root*."""
    resolved: set[str] = set()
    for entry in excludes:
        candidate = Path(entry)
        if not candidate.is_absolute():
            candidate = root / candidate
        resolved.add(os.path.normpath(str(candidate.resolve())))
    return frozenset(resolved)


def _list_dir(directory: str) -> list[tuple[str, bool, int]]:
    """Return (path, is_dir, size) for every entry; raises OSError."""
    entries: list[tuple[str, bool, int]] = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                if entry.is_dir(follow_symlinks=False):
                    entries.append((entry.path, True, 0))
                elif entry.is_file():
                    entries.append((entry.path, False, entry.stat().st_size))
            except OSError:
                logger.debug("Skipping unreadable entry %s", entry.path)
    return entries


class FileEnumerator:
    """Walks a directory tree depth-first and yields :class:`FileTask` objects.

    Parameters
    ----------
    excludes:
        Directory names (resolved against the root) or absolute paths whose
        subtrees are pruned entirely.
    extensions:
        Allowed file suffixes including the leading dot.
    max_size_kb:
        Files larger than this are skipped; ``None`` disables the limit.
    """

    def __init__(
        self,
        excludes: Iterable[str] = DEFAULT_EXCLUDES,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        max_size_kb: int | None = None,
    ) -> None:
        self.excludes = list(excludes)
        self.extensions = frozenset(extensions)
        self.max_size_kb = max_size_kb

    def _accepts(self, path: str, size: int) -> bool:
        if os.path.splitext(path)[1] not in self.extensions:
            return False
        if self.max_size_kb is not None and size > self.max_size_kb * 1024:
            return False
        return True

    async def enumerate(
        self,
        root: str | Path,
        cancel_token: CancelToken | None = None,
    ) -> list[FileTask]:
        """Collect candidate files under *root*.

        The result is not sorted. Unreadable directories contribute nothing.
        """
        root_path = Path(root).resolve()
        skip = resolve_excludes(root_path, self.excludes)
        tasks: list[FileTask] = []

        async def walk(directory: str) -> None:
            if cancel_token is not None and cancel_token.is_cancelled:
                return
            try:
                entries = await asyncio.to_thread(_list_dir, directory)
            except OSError as exc:
                logger.debug("Cannot read directory %s: %s", directory, exc)
                return
            for path, is_dir, size in entries:
                if cancel_token is not None and cancel_token.is_cancelled:
                    return
                if is_dir:
                    if os.path.normpath(os.path.realpath(path)) in skip:
                        continue
                    await walk(path)
                elif self._accepts(path, size):
                    tasks.append(
                        FileTask(path=path, extension=os.path.splitext(path)[1], size=size)
                    )

        await walk(str(root_path))
        logger.info("Enumerated %d candidate files under %s", len(tasks), root_path)
        return tasks
