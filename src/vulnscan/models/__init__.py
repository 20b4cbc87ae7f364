# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Data models shared across the scanner, enrichment, and reporting layers."""

from vulnscan.models.finding import EnrichedFinding, Finding, Position, Range
from vulnscan.models.raw import RawExtra, RawMetadata, RawPosition, RawRecord
from vulnscan.models.scan import BatchRunResult, FileTask, ScanBatch, ScanReport

__all__ = [
    "BatchRunResult",
    "EnrichedFinding",
    "FileTask",
    "Finding",
    "Position",
    "Range",
    "RawExtra",
    "RawMetadata",
    "RawPosition",
    "RawRecord",
    "ScanBatch",
    "ScanReport",
]
