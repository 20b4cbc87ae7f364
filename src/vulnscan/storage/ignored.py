# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fingerprints the user marked as false positives, persisted as JSON."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, TypeVar

logger = logging.getLogger("vulnscan.storage.ignored")


class _Fingerprinted(Protocol):
    @property
    def fingerprint(self) -> str: ...


T = TypeVar("T", bound=_Fingerprinted)


class IgnoreStore:
    """Set of ignored fingerprints backed by a JSON array on disk.

    Loaded lazily. A missing or corrupt file reads as an empty set.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fingerprints: set[str] | None = None

    def load(self) -> set[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            data = []
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable ignore list %s: %s", self.path, exc)
            data = []
        if not isinstance(data, list):
            logger.warning("Ignore list %s is not a JSON array; treating as empty", self.path)
            data = []
        self._fingerprints = {str(item) for item in data if isinstance(item, str) and item}
        return set(self._fingerprints)

    @property
    def fingerprints(self) -> set[str]:
        if self._fingerprints is None:
            self.load()
        assert self._fingerprints is not None
        return self._fingerprints

    def is_ignored(self, fingerprint: str) -> bool:
        return fingerprint in self.fingerprints

    def toggle(self, fingerprint: str) -> bool:
        """Flip *fingerprint* and persist. Returns True when it is now ignored."""
        fingerprints = self.fingerprints
        if fingerprint in fingerprints:
            fingerprints.discard(fingerprint)
            ignored = False
        else:
            fingerprints.add(fingerprint)
            ignored = True
        self._save()
        logger.info("%s %s", "Ignored" if ignored else "Restored", fingerprint)
        return ignored

    def filter(self, items: Iterable[T]) -> list[T]:
        """Drop items whose fingerprint is ignored."""
        fingerprints = self.fingerprints
        return [item for item in items if item.fingerprint not in fingerprints]

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".ignored.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(sorted(self.fingerprints), f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
