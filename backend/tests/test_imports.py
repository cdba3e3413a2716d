# backend/tests/test_imports.py
"""
Tests that each top-level module imports cleanly in a fresh interpreter.

The test session imports modules in a fixed order, which can hide an import
cycle; a subprocess starts from an empty module table.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]


def _import_in_fresh_interpreter(module: str) -> subprocess.CompletedProcess:
    env = {**os.environ, "ENVIRONMENT": "test", "RATE_PROVIDER": "static"}
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(BACKEND_DIR), env.get("PYTHONPATH", "")) if p
    )
    return subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=BACKEND_DIR,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )


class TestFreshImports:
    """Modules must not depend on a prior import to break a cycle."""

    @pytest.mark.parametrize(
        "module",
        [
            "finance_engine.models",
            "finance_engine.services",
            "finance_engine.services.currency.types",
            "finance_engine.services.analytics",
            "finance_engine.services.loans",
            "finance_engine.services.dashboard",
            "finance_engine.services.budget",
            "finance_engine.schemas",
            "finance_engine.main",
        ],
    )
    def test_module_imports_first(self, module):
        result = _import_in_fresh_interpreter(module)

        assert result.returncode == 0, result.stderr
