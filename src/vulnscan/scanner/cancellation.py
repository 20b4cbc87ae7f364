# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cooperative cancellation shared by the batcher, scanner, and enrichment loop."""

from __future__ import annotations

import asyncio


class CancelToken:
    """Set-once cancellation flag.

    Readers poll :attr:`is_cancelled` between stages; the scanner adapter
    awaits :meth:`wait` to terminate an in-flight process early.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
