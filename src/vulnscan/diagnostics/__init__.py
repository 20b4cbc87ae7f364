# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-file registry of published findings."""

from vulnscan.diagnostics.registry import DiagnosticRegistry

__all__ = ["DiagnosticRegistry"]
