# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Report renderers for scan results."""

from vulnscan.report.console import format_console
from vulnscan.report.json_fmt import format_json, format_json_summary
from vulnscan.report.markdown import render_markdown
from vulnscan.report.sarif import format_sarif, report_to_sarif

__all__ = [
    "format_console",
    "format_json",
    "format_json_summary",
    "format_sarif",
    "render_markdown",
    "report_to_sarif",
]
