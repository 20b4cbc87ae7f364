# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Persistent workspace state."""

from vulnscan.storage.ignored import IgnoreStore

__all__ = ["IgnoreStore"]
