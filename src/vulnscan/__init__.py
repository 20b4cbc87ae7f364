# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""vulnscan - Batched static-analysis orchestration with AI enrichment and patching."""

__version__ = "0.1.0"

from vulnscan.sdk import apply_patch, apply_patch_sync, scan, scan_sync

__all__ = [
    "__version__",
    "apply_patch",
    "apply_patch_sync",
    "scan",
    "scan_sync",
]
