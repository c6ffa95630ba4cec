"""pytest plugin that records per-line execution counts.

Running ``pytest --akainaa`` counts every executed line of the project's
files during the session and writes the coverage report the heat map
viewer watches.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from akainaa.collector import LineCounter, write_report
from akainaa.config import load_config, merge_configs


_COUNTER_KEY = pytest.StashKey[tuple[LineCounter, Path]]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for akainaa."""
    group = parser.getgroup('akainaa', 'line execution heat map')
    group.addoption(
        '--akainaa',
        action='store_true',
        default=False,
        dest='akainaa',
        help='Record per-line execution counts and write the akainaa coverage report',
    )
    group.addoption(
        '--akainaa-report',
        action='store',
        default=None,
        dest='akainaa_report',
        help='Report location relative to the rootdir (default: tmp/coverage.json)',
    )


def pytest_sessionstart(session: pytest.Session) -> None:
    """Start counting when --akainaa is given."""
    config = session.config
    if not config.option.akainaa:
        return
    rootdir = Path(config.rootpath)
    heatmap_config = merge_configs(load_config(rootdir), cli_report_path=config.option.akainaa_report)
    counter = LineCounter(rootdir, exclude=heatmap_config.exclude)
    config.stash[_COUNTER_KEY] = (counter, rootdir / heatmap_config.report_path)
    counter.start()


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:  # noqa: ARG001
    """Stop counting and write the report."""
    state = session.config.stash.get(_COUNTER_KEY, None)
    if state is None:
        return
    counter, report_path = state
    counter.stop()
    write_report(report_path, counter.to_report())
