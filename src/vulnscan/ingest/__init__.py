# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Upload of scans and findings to a reporting backend."""

from vulnscan.ingest.uploader import FindingUploader, finding_to_wire, upload_report

__all__ = ["FindingUploader", "finding_to_wire", "upload_report"]
