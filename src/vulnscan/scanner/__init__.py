# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Scan orchestration: enumeration, batching, normalization, and the pipeline."""
