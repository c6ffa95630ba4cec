"""Shared pytest configuration and fixtures for akainaa tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from akainaa.coverage.snapshot import Snapshot


if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    root = tmp_path / 'project'
    root.mkdir()
    return root


@pytest.fixture
def write_report(project_root: Path):
    """Factory fixture that writes a coverage report into the project."""

    def _write_report(data: Any, relative_path: str = 'tmp/coverage.json') -> Path:
        report_path = project_root / relative_path
        report_path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data)
        report_path.write_text(text)
        return report_path

    return _write_report


@pytest.fixture
def make_snapshot():
    """Factory fixture for creating single-file snapshots."""

    def _make_snapshot(lines: list[int | None], file_path: str = '/src/app.py') -> Snapshot:
        return Snapshot({file_path: lines})

    return _make_snapshot
