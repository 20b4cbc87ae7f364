# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Semgrep adapter: binary resolution, process execution, and JSON parsing."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import signal
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from vulnscan.core.constants import REDUCED_RETRY_MIN_CONFIGS, REDUCED_SEMGREP_CONFIGS
from vulnscan.core.exceptions import (
    MalformedOutputError,
    ScanExecutionFailedError,
    ToolNotFoundError,
)
from vulnscan.models.raw import RawRecord
from vulnscan.scanner.cancellation import CancelToken

logger = logging.getLogger("vulnscan.scanner.semgrep")

DEFAULT_CANDIDATES: tuple[str, ...] = (
    "semgrep",
    "~/.local/bin/semgrep",
    "/usr/local/bin/semgrep",
    "/opt/homebrew/bin/semgrep",
)

_VERSION_TIMEOUT = 3.0
_STDERR_LIMIT = 2000
_DRAIN_TIMEOUT = 2.0


class ProcessStatus(StrEnum):
    OK = "ok"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(slots=True)
class ProcessOutcome:
    """Result of one external process execution."""

    status: ProcessStatus
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""


def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* and the rest of its process group."""
    with contextlib.suppress(ProcessLookupError, PermissionError):
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()


async def _drain(
    proc: asyncio.subprocess.Process,
    communicate: asyncio.Future[tuple[bytes, bytes]],
) -> tuple[bytes, bytes]:
    """Collect the output of a killed process without waiting on stray pipe holders."""
    try:
        return await asyncio.wait_for(communicate, timeout=_DRAIN_TIMEOUT)
    except TimeoutError:
        logger.warning(
            "Output of killed process %d not drained within %.0fs", proc.pid, _DRAIN_TIMEOUT
        )
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(proc.wait(), timeout=_DRAIN_TIMEOUT)
        return b"", b""


async def run_process(
    command: Sequence[str],
    *,
    timeout: float | None = None,
    cancel_token: CancelToken | None = None,
) -> ProcessOutcome:
    """Run *command* and classify how it ended.

    The process is killed when *timeout* elapses or *cancel_token* fires.
    A missing executable is reported as a failed outcome.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        return ProcessOutcome(status=ProcessStatus.FAILED, stderr=str(exc))

    communicate = asyncio.ensure_future(proc.communicate())
    waiters: set[asyncio.Future[object]] = {communicate}  # type: ignore[arg-type]
    cancel_wait: asyncio.Future[None] | None = None
    if cancel_token is not None:
        cancel_wait = asyncio.ensure_future(cancel_token.wait())
        waiters.add(cancel_wait)  # type: ignore[arg-type]

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        _kill(proc)
        communicate.cancel()
        raise
    finally:
        if cancel_wait is not None and not cancel_wait.done():
            cancel_wait.cancel()

    if communicate in done:
        stdout_b, stderr_b = communicate.result()
        status = ProcessStatus.OK if proc.returncode == 0 else ProcessStatus.FAILED
        return ProcessOutcome(
            status=status,
            returncode=proc.returncode,
            stdout=stdout_b.decode("utf-8", errors="replace"),
            stderr=stderr_b.decode("utf-8", errors="replace"),
        )

    _kill(proc)
    stdout_b, stderr_b = await _drain(proc, communicate)
    status = (
        ProcessStatus.CANCELLED
        if cancel_wait is not None and cancel_wait in done
        else ProcessStatus.TIMEOUT
    )
    return ProcessOutcome(
        status=status,
        returncode=proc.returncode,
        stdout=stdout_b.decode("utf-8", errors="replace"),
        stderr=stderr_b.decode("utf-8", errors="replace"),
    )


def build_args(files: Sequence[str], configs: Sequence[str], timeout_seconds: int) -> list[str]:
    args = ["--json", "--quiet", f"--timeout={timeout_seconds}", "--metrics=off"]
    for config in configs:
        args.extend(["--config", config])
    # Paths go last.
    args.extend(files)
    return args


def parse_output(stdout: str) -> list[RawRecord]:
    """Parse scanner stdout into raw records.

    Raises :class:`MalformedOutputError` when the output is not a JSON
    object; a missing ``results`` array is an empty result set.
    """
    try:
        data = json.loads(stdout)
    except ValueError as exc:
        raise MalformedOutputError(f"scanner output is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedOutputError("scanner output is not a JSON object")

    results = data.get("results")
    if not isinstance(results, list):
        return []

    records: list[RawRecord] = []
    for entry in results:
        if not isinstance(entry, dict):
            continue
        records.append(RawRecord.from_json(entry))
    return records


class SemgrepAdapter:
    """Runs Semgrep over a batch of files.

    Parameters
    ----------
    binary:
        Explicit executable; used as-is without a version check.
    candidates:
        Ordered executables to try when *binary* is not given.
    version_timeout:
        Seconds allowed for each ``--version`` check.
    """

    def __init__(
        self,
        binary: str | None = None,
        candidates: Sequence[str] | None = None,
        version_timeout: float = _VERSION_TIMEOUT,
    ) -> None:
        self.binary = binary.strip() if binary and binary.strip() else None
        self.candidates = list(candidates if candidates is not None else DEFAULT_CANDIDATES)
        self.version_timeout = version_timeout
        self._resolved: str | None = None

    async def resolve_binary(self) -> str:
        """Return the scanner executable, trying candidates on first use."""
        if self.binary:
            return self.binary
        if self._resolved:
            return self._resolved

        for candidate in self.candidates:
            executable = os.path.expanduser(candidate)
            outcome = await run_process([executable, "--version"], timeout=self.version_timeout)
            if outcome.status == ProcessStatus.OK:
                logger.info("Using semgrep at %s (%s)", executable, outcome.stdout.strip())
                self._resolved = executable
                return executable
            logger.debug("Semgrep candidate %s unavailable: %s", executable, outcome.status)

        raise ToolNotFoundError(
            f"semgrep not found; tried {', '.join(self.candidates)}",
            candidates=self.candidates,
        )

    async def invoke(
        self,
        files: Sequence[str],
        configs: Sequence[str],
        timeout_seconds: int,
        cancel_token: CancelToken | None = None,
    ) -> list[RawRecord]:
        """Scan *files* with *configs* and return raw records.

        A cancelled run returns an empty list; callers check the token to
        tell it apart from a clean scan.
        """
        executable = await self.resolve_binary()
        try:
            return await self._run_once(executable, files, configs, timeout_seconds, cancel_token)
        except ScanExecutionFailedError:
            reduced = list(REDUCED_SEMGREP_CONFIGS)
            if len(configs) <= REDUCED_RETRY_MIN_CONFIGS or list(configs) == reduced:
                raise
            logger.warning("Semgrep failed with %d configs; retrying with reduced ruleset", len(configs))
            return await self._run_once(executable, files, reduced, timeout_seconds, cancel_token)

    async def _run_once(
        self,
        executable: str,
        files: Sequence[str],
        configs: Sequence[str],
        timeout_seconds: int,
        cancel_token: CancelToken | None,
    ) -> list[RawRecord]:
        command = [executable, *build_args(files, configs, timeout_seconds)]
        logger.debug("[semgrep] %s (%d files)", " ".join(command[: len(command) - len(files)]), len(files))

        outcome = await run_process(command, timeout=timeout_seconds, cancel_token=cancel_token)

        if outcome.status == ProcessStatus.CANCELLED:
            logger.info("Semgrep run cancelled after terminating the process")
            return []

        if outcome.status == ProcessStatus.TIMEOUT:
            raise ScanExecutionFailedError(
                f"semgrep timed out after {timeout_seconds}s",
                stderr=outcome.stderr[:_STDERR_LIMIT],
                timed_out=True,
            )

        try:
            records: list[RawRecord] | None = parse_output(outcome.stdout or "{}")
        except MalformedOutputError as exc:
            records = None
            malformed = exc

        if outcome.status == ProcessStatus.FAILED:
            # Semgrep exits non-zero when it reports findings; usable stdout wins.
            if records is not None and outcome.stdout.strip():
                return records
            raise ScanExecutionFailedError(
                f"semgrep exited with code {outcome.returncode}",
                stderr=outcome.stderr[:_STDERR_LIMIT],
                returncode=outcome.returncode,
            )

        if records is None:
            logger.warning("%s (%d bytes); treating batch as empty", malformed, len(outcome.stdout))
            return []
        return records
