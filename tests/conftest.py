"""Pytest bootstrap for linepick tests.

Puts the repository root on ``sys.path`` so ``import linepick`` resolves to
the local package, and keeps every test away from the user's own rc file
and trace settings.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr("linepick.config.DEFAULT_CONFIG_PATH", tmp_path / "config" / "config.json")
    monkeypatch.setattr("linepick.config.LEGACY_CONFIG_PATH", tmp_path / "legacy" / "config.json")
    monkeypatch.delenv("LINEPICK_TRACE", raising=False)
