# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import stat
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from vulnscan.core.config import Settings
from vulnscan.core.constants import Severity
from vulnscan.models.finding import Finding, Position, Range
from vulnscan.scanner.normalize import compute_fingerprint

# A stand-in for the semgrep executable. It reports one WARNING result for
# every line containing "eval(" in the files it is given. FAKE_SEMGREP_MODE
# switches it to other behaviours.
_FAKE_SEMGREP = """\
import json
import os
import sys
import time

args = sys.argv[1:]
if "--version" in args:
    print("1.99.0")
    sys.exit(0)

mode = os.environ.get("FAKE_SEMGREP_MODE", "ok")
log = os.environ.get("FAKE_SEMGREP_LOG")
if log:
    with open(log, "a", encoding="utf-8") as fh:
        fh.write(json.dumps(args) + "\\n")

if mode == "sleep":
    time.sleep(30)
if mode == "fail":
    sys.stderr.write("fatal: rules could not be loaded\\n")
    sys.exit(2)
if mode == "malformed":
    print("this is not json")
    sys.exit(0)

files = []
skip = False
for arg in args:
    if skip:
        skip = False
        continue
    if arg == "--config":
        skip = True
        continue
    if arg.startswith("--"):
        continue
    files.append(arg)

results = []
for path in files:
    with open(path, encoding="utf-8") as fh:
        for number, line in enumerate(fh, start=1):
            col = line.find("eval(")
            if col == -1:
                continue
            results.append({
                "check_id": "python.lang.security.audit.eval-detected",
                "path": path,
                "start": {"line": number, "col": col + 1},
                "end": {"line": number, "col": len(line.rstrip()) + 1},
                "extra": {
                    "severity": "WARNING",
                    "message": "Detected use of eval()",
                    "metadata": {
                        "cwe": ["CWE-95: Eval Injection"],
                        "owasp": ["A03:2021 - Injection"],
                    },
                },
            })

print(json.dumps({"results": results, "errors": []}))
sys.exit(1 if results else 0)
"""


@pytest.fixture
def fake_semgrep(tmp_path: Path) -> Path:
    """Path to an executable that behaves like ``semgrep --json``."""
    script = tmp_path / "bin" / "semgrep"
    script.parent.mkdir()
    script.write_text(f"#!{sys.executable}\n" + _FAKE_SEMGREP, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small project tree with one vulnerable and one clean file."""
    root = tmp_path / "project"
    (root / "pkg").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "pkg" / "views.py").write_text(
        textwrap.dedent(
            """\
            import os


            def handler(request):
                expr = request.args["q"]
                return eval(expr)
            """
        ),
        encoding="utf-8",
    )
    (root / "pkg" / "models.py").write_text("class User:\n    pass\n", encoding="utf-8")
    (root / "node_modules" / "dep" / "index.js").write_text("eval(x)\n", encoding="utf-8")
    (root / "README.md").write_text("eval( in docs\n", encoding="utf-8")
    return root


@pytest.fixture
def settings(fake_semgrep: Path) -> Settings:
    return Settings(
        semgrep_bin=str(fake_semgrep),
        semgrep_configs=["p/python"],
        target_directory="root",
        anthropic_api_key="",
        min_severity=Severity.LOW,
    )


@pytest.fixture
def finding_factory() -> Callable[..., Finding]:
    """Build findings with a real fingerprint; keyword overrides for any field."""

    def make(
        file: str = "/work/app/models/user.rb",
        rule_id: str = "ruby.rails.security.sql-injection",
        line: int = 10,
        message: str = "Possible SQL injection",
        severity: Severity = Severity.HIGH,
        rel_file: str | None = None,
        snippet: str | None = None,
    ) -> Finding:
        return Finding(
            fingerprint=compute_fingerprint(file, rule_id, line, message),
            rule_id=rule_id,
            severity=severity,
            file=file,
            rel_file=rel_file if rel_file is not None else file.lstrip("/"),
            range=Range(start=Position(line=line, col=4), end=Position(line=line, col=30)),
            message=message,
            snippet=snippet,
        )

    return make
