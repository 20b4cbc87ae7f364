# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Bounded-concurrency task runner."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from vulnscan.scanner.cancellation import CancelToken

logger = logging.getLogger("vulnscan.enrichment.limiter")

TaskFactory = Callable[[], Awaitable[Any]]


async def run_all(
    tasks: Sequence[TaskFactory],
    limit: int,
    cancel_token: CancelToken | None = None,
) -> None:
    """Run every task with at most *limit* in flight.

    ``min(limit, len(tasks))`` workers pull the next unclaimed index from a
    shared counter. A task that raises is logged and does not stop the
    others. Once *cancel_token* fires no further tasks are started.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while next_index < len(tasks):
            if cancel_token is not None and cancel_token.is_cancelled:
                return
            idx = next_index
            next_index += 1
            try:
                await tasks[idx]()
            except Exception:
                logger.exception("Task %d failed", idx)

    await asyncio.gather(*(worker() for _ in range(min(limit, len(tasks)))))


class ConcurrencyLimiter:
    """Reusable wrapper around :func:`run_all` with a fixed limit."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit

    async def run_all(
        self,
        tasks: Sequence[TaskFactory],
        cancel_token: CancelToken | None = None,
    ) -> None:
        await run_all(tasks, self.limit, cancel_token=cancel_token)
