# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Debounced single-file rescans for files being edited."""

from vulnscan.live.scanner import LiveScanner, collect_file_states, detect_changes

__all__ = ["LiveScanner", "collect_file_states", "detect_changes"]
