"""The heat map engine tying ingestion, history, merging and rendering together.

A HeatmapEngine is created per project and owns the snapshot history and the
intensity palette. Hosts forward their events to it:

    engine = HeatmapEngine(project_root, config, renderer)
    engine.activate()                      # initial load and paint
    engine.handle_report_event(event)      # report created/changed/deleted
    engine.set_active_file(path)           # user switched files
    engine.reset()                         # forget all history
    engine.dispose()

Each call runs the whole pipeline (ingest, merge, bucket, render) to
completion before returning.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from akainaa.config import HeatmapConfig
from akainaa.coverage.history import SnapshotHistory
from akainaa.coverage.ingestor import LoadResult, LoadStatus, load
from akainaa.coverage.merge import compute
from akainaa.heatmap.bucketing import BucketAssignment, assign
from akainaa.heatmap.palette import Palette


if TYPE_CHECKING:
    from pathlib import Path

    from akainaa.coverage.merge import MergedCoverage
    from akainaa.watcher import ReportEvent


logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Consumer that paints a file's bucket assignment."""

    def render(self, file_path: str, assignment: BucketAssignment) -> None:
        """Paint each bucket's lines with the style of that bucket index."""
        ...


class HeatmapEngine:
    """Owns the snapshot history of one project and drives rendering.

    Attributes:
        project_root: Project directory, or None when no project is open.
        config: Active configuration.
        history: The rolling snapshot history.
        palette: Intensity levels, one per bucket.
        renderer: Receives render requests, may be None.
        active_file: Absolute path of the file currently displayed.
    """

    def __init__(
        self,
        project_root: Path | None,
        config: HeatmapConfig | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        """Create an inactive engine.

        Args:
            project_root: Project directory; None disables ingestion.
            config: Configuration, defaults to HeatmapConfig().
            renderer: Receives the assignment of the active file.
        """
        self.project_root = project_root
        self.config = config or HeatmapConfig()
        self.history = SnapshotHistory(self.config.history_size)
        self.palette = Palette(self.config.num_buckets)
        self.renderer = renderer
        self.active_file: str | None = None
        self._active = False

    @property
    def is_active(self) -> bool:
        """Return True between activate() and dispose()."""
        return self._active

    @property
    def report_path(self) -> Path | None:
        """Return the absolute location of the coverage report."""
        if self.project_root is None:
            return None
        return self.project_root / self.config.report_path

    def activate(self) -> LoadResult | None:
        """Load the current report and paint the active file.

        Returns:
            The LoadResult of the initial load, or None if already active.
        """
        if self._active:
            return None
        self._active = True
        logger.info('akainaa activated for %s', self.project_root)
        return self.refresh()

    def dispose(self) -> None:
        """Drop all state; later triggers are ignored."""
        self.history.clear()
        self.active_file = None
        self._active = False

    def refresh(self) -> LoadResult:
        """Ingest the report, then re-render the active file.

        A malformed report aborts the run: nothing is pushed and nothing is
        rendered. A missing report or project root leaves the history as it
        is and still renders.

        Returns:
            The LoadResult of the ingestion.
        """
        report_path = self.report_path
        if report_path is None:
            result = LoadResult(LoadStatus.NO_PROJECT_ROOT)
        else:
            result = load(report_path, self.project_root)

        if result.is_malformed:
            logger.error('Malformed coverage report: %s', result.error)
            return result

        if result.snapshot is not None:
            self.history.push(result.snapshot)
            logger.debug('History holds %d snapshots', len(self.history))

        self.render()
        return result

    def handle_report_event(self, event: ReportEvent) -> LoadResult | None:
        """React to the report being created, changed or deleted."""
        if not self._active:
            return None
        logger.debug('Report %s, refreshing', event.value)
        return self.refresh()

    def reset(self) -> None:
        """Forget all snapshots and clear the highlights."""
        self.history.clear()
        logger.info('Coverage history reset')
        self.render()

    def set_active_file(self, file_path: str | None) -> None:
        """Switch the displayed file and paint it."""
        self.active_file = file_path
        if self._active:
            self.render()

    def document_changed(self, file_path: str) -> None:
        """Repaint after the displayed document was edited."""
        if self._active and file_path == self.active_file:
            self.render()

    def merged_coverage(self) -> MergedCoverage | None:
        """Merge the current history from scratch."""
        return compute(self.history)

    def assignment_for(self, file_path: str, merged: MergedCoverage | None = None) -> BucketAssignment:
        """Compute the bucket assignment of one file.

        Args:
            file_path: Absolute path of the file.
            merged: Pre-computed merged coverage; computed when omitted.

        Returns:
            The assignment, empty if there is no data for the file.
        """
        if merged is None:
            merged = self.merged_coverage()
        lines = merged.get(file_path) if merged is not None else None
        if lines is None:
            return BucketAssignment.empty(len(self.palette))
        return assign(lines, num_buckets=len(self.palette), floor=self.config.floor)

    def render(self) -> BucketAssignment | None:
        """Send the active file's assignment to the renderer.

        Returns:
            The rendered assignment, or None if no file is active.
        """
        if self.active_file is None:
            return None
        assignment = self.assignment_for(self.active_file)
        if self.renderer is not None:
            self.renderer.render(self.active_file, assignment)
        return assignment
