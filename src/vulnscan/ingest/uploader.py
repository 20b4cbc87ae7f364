# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Async HTTP client for the findings ingest API."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from vulnscan import __version__
from vulnscan.core.exceptions import UploadError
from vulnscan.models.finding import Finding
from vulnscan.models.scan import ScanReport

logger = logging.getLogger("vulnscan.ingest.uploader")

_TIMEOUT = 15.0
_USER_AGENT = f"vulnscan/{__version__}"

SCANS_PATH = "/api/v1/scans"
FINDINGS_PATH = "/api/v1/findings"


def _split_ids(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def finding_to_wire(finding: Finding, scan_id: str) -> dict[str, Any]:
    """Wire record: workspace-relative path, 0-based positions."""
    return {
        "fingerprint": finding.fingerprint,
        "rule_id": finding.rule_id,
        "severity": finding.severity.value,
        "path": finding.rel_file,
        "line": finding.range.start.line,
        "col": finding.range.start.col,
        "end_line": finding.range.end.line,
        "end_col": finding.range.end.col,
        "message": finding.message,
        "engine": finding.engine,
        "cwe": _split_ids(finding.cwe),
        "owasp": _split_ids(finding.owasp),
        "scan_id": scan_id,
    }


def _check_response(resp: httpx.Response, context: str) -> None:
    if resp.is_success:
        return
    msg = f"{context}: HTTP {resp.status_code}"
    body = resp.text[:200]
    if body:
        msg = f"{msg}: {body}"
    raise UploadError(msg, status_code=resp.status_code)


class FindingUploader:
    """Posts scans and their findings to the backend.

    Parameters
    ----------
    base_url:
        Backend root URL, without the ``/api/v1`` prefix.
    access_token:
        Bearer token sent with every request.
    timeout:
        HTTP timeout in seconds.
    """

    def __init__(self, base_url: str, access_token: str, timeout: float = _TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={
                "User-Agent": _USER_AGENT,
                "Authorization": f"Bearer {self.access_token}",
            },
        )

    async def create_or_update_scan(
        self,
        payload: dict[str, Any],
        idempotency_key: str,
    ) -> str:
        """Register a scan and return its backend id."""
        body = {**payload, "scan": payload, "idempotency_key": idempotency_key}
        async with self._client() as client:
            try:
                resp = await client.post(
                    f"{self.base_url}{SCANS_PATH}",
                    json=body,
                    headers={"Idempotency-Key": idempotency_key},
                )
            except httpx.HTTPError as exc:
                raise UploadError(f"create scan: {exc}") from exc

        _check_response(resp, "create scan")
        data = resp.json()
        scan_id = (data.get("id") or data.get("scan_id")) if isinstance(data, dict) else None
        if not scan_id:
            raise UploadError("create scan: response carries no id", status_code=resp.status_code)
        return str(scan_id)

    async def upload_findings(self, scan_id: str, findings: Sequence[Finding]) -> int:
        """Upload *findings* for *scan_id*; returns how many were accepted.

        Tries one bulk request first and falls back to one request per
        finding when the bulk endpoint rejects it.
        """
        if not scan_id:
            raise UploadError("invalid scan id for findings upload")
        if not findings:
            return 0

        items = [finding_to_wire(f, scan_id) for f in findings]
        url = f"{self.base_url}{FINDINGS_PATH}"
        async with self._client() as client:
            try:
                resp = await client.post(url, json={"scan_id": scan_id, "items": items})
            except httpx.HTTPError as exc:
                raise UploadError(f"upload findings: {exc}") from exc
            if resp.is_success:
                logger.info("Uploaded %d findings to scan %s", len(items), scan_id)
                return len(items)

            logger.warning(
                "Bulk upload rejected (HTTP %d); uploading one by one", resp.status_code
            )
            accepted = 0
            for item in items:
                try:
                    single = await client.post(url, json={"scan_id": scan_id, "finding": item})
                except httpx.HTTPError as exc:
                    logger.error("Finding %s failed: %s", item["fingerprint"], exc)
                    continue
                if single.is_success:
                    accepted += 1
                else:
                    logger.error(
                        "Finding %s failed: HTTP %d %s",
                        item["fingerprint"],
                        single.status_code,
                        single.text[:200],
                    )

        logger.info("Uploaded %d/%d findings to scan %s", accepted, len(items), scan_id)
        return accepted


def scan_payload(report: ScanReport) -> dict[str, Any]:
    return {
        "workspace": report.workspace_root,
        "target_root": report.target_root,
        "status": report.status.value,
        "configs": report.configs,
        "started_at": report.started_at.isoformat(),
        "completed_at": report.completed_at.isoformat() if report.completed_at else None,
        "finding_count": len(report.items),
        "finding_count_by_severity": report.finding_count_by_severity,
    }


def idempotency_key(report: ScanReport) -> str:
    seed = f"{report.workspace_root}\x1f{report.started_at.isoformat()}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


async def upload_report(uploader: FindingUploader, report: ScanReport) -> tuple[str, int]:
    """Create the scan and upload its findings. Returns ``(scan_id, accepted)``."""
    scan_id = await uploader.create_or_update_scan(scan_payload(report), idempotency_key(report))
    accepted = await uploader.upload_findings(scan_id, [item.finding for item in report.items])
    return scan_id, accepted
