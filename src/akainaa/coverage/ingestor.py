"""Loading coverage reports into Snapshots.

The report is a JSON object keyed by file path. Relative keys are resolved
against the project root, absolute keys are kept as they are:

    {
        "lib/app.py": {"lines": [null, 1, 0, 4]},
        "/opt/shared/util.py": {"lines": [2, null]}
    }

Missing project roots and missing report files are normal idle states and
produce a LoadResult without a snapshot. Unparsable content produces a
MALFORMED_REPORT result so the caller decides how to surface it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
import os
from typing import TYPE_CHECKING, Any

from akainaa.coverage.snapshot import Snapshot


if TYPE_CHECKING:
    from pathlib import Path

    from akainaa.coverage.snapshot import ExecutedCount


logger = logging.getLogger(__name__)


class MalformedReportError(ValueError):
    """Raised when report content is not a valid coverage report."""


class LoadStatus(Enum):
    """Outcome of loading a coverage report.

    Attributes:
        LOADED: The report was parsed into a snapshot.
        NO_PROJECT_ROOT: No project root is available, nothing was read.
        REPORT_MISSING: The report file does not exist.
        MALFORMED_REPORT: The report exists but could not be parsed.
    """

    LOADED = 'loaded'
    NO_PROJECT_ROOT = 'no_project_root'
    REPORT_MISSING = 'report_missing'
    MALFORMED_REPORT = 'malformed_report'


@dataclass(frozen=True)
class LoadResult:
    """Result of a single ingestion attempt.

    Attributes:
        status: What happened.
        snapshot: The parsed snapshot when status is LOADED.
        error: Description of the problem when status is MALFORMED_REPORT.
    """

    status: LoadStatus
    snapshot: Snapshot | None = None
    error: str | None = None

    @property
    def is_loaded(self) -> bool:
        """Return True if a snapshot was produced."""
        return self.status == LoadStatus.LOADED

    @property
    def is_malformed(self) -> bool:
        """Return True if the report could not be parsed."""
        return self.status == LoadStatus.MALFORMED_REPORT


def resolve_path(file_path: str, project_root: Path) -> str:
    """Make a report key absolute by prefixing the project root."""
    if os.path.isabs(file_path):
        return file_path
    return os.path.join(str(project_root), file_path)


def _parse_lines(file_path: str, entry: Any) -> list[ExecutedCount]:
    if not isinstance(entry, dict) or 'lines' not in entry:
        msg = f'entry for {file_path!r} has no "lines" array'
        raise MalformedReportError(msg)
    lines = entry['lines']
    if not isinstance(lines, list):
        msg = f'"lines" for {file_path!r} is not an array'
        raise MalformedReportError(msg)
    for index, count in enumerate(lines):
        if count is None:
            continue
        # bool is an int subclass but never a valid count
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            msg = f'invalid count {count!r} at line {index} of {file_path!r}'
            raise MalformedReportError(msg)
    return lines


def parse_report(text: str, project_root: Path) -> Snapshot:
    """Parse report content into a snapshot with absolute file paths.

    Args:
        text: The JSON report content.
        project_root: Directory relative report keys are resolved against.

    Returns:
        The parsed Snapshot.

    Raises:
        MalformedReportError: If the content is not JSON or does not have the
            report shape.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f'report is not valid JSON: {exc}'
        raise MalformedReportError(msg) from exc

    if not isinstance(data, dict):
        msg = f'report must be a JSON object, got {type(data).__name__}'
        raise MalformedReportError(msg)

    files = {resolve_path(file_path, project_root): _parse_lines(file_path, entry) for file_path, entry in data.items()}
    return Snapshot(files)


def load(report_path: Path, project_root: Path | None) -> LoadResult:
    """Load a coverage report from disk.

    Args:
        report_path: Location of the report file.
        project_root: Project directory, or None when no project is open.

    Returns:
        A LoadResult; only LOADED results carry a snapshot.
    """
    if project_root is None:
        logger.debug('No project root, skipping report %s', report_path)
        return LoadResult(LoadStatus.NO_PROJECT_ROOT)

    try:
        text = report_path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.debug('Coverage report %s does not exist', report_path)
        return LoadResult(LoadStatus.REPORT_MISSING)

    try:
        snapshot = parse_report(text, project_root)
    except MalformedReportError as exc:
        return LoadResult(LoadStatus.MALFORMED_REPORT, error=f'{report_path}: {exc}')

    logger.debug('Loaded %d files from %s', len(snapshot), report_path)
    return LoadResult(LoadStatus.LOADED, snapshot=snapshot)
