"""Integration tests running the whole report-to-heat-map pipeline.

A real report file is rewritten between refreshes, picked up by the
watcher, merged across the history window and painted by the console
renderer.
"""

from __future__ import annotations

from io import StringIO
import json
import os

import pytest
from watchdog.events import FileDeletedEvent, FileModifiedEvent

from akainaa.collector import write_report
from akainaa.config import HeatmapConfig
from akainaa.engine import HeatmapEngine
from akainaa.reporting.console import ConsoleRenderer
from akainaa.watcher import ReportEvent, ReportWatcher


@pytest.fixture
def source_file(project_root):
    path = project_root / 'app.py'
    path.write_text('x = 1\ny = 2\n')
    return path


def publish(report_path, lines):
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps({'app.py': {'lines': lines}}))


@pytest.mark.medium
class TestWatchedPipeline:
    """Watcher events drive the engine end to end."""

    def test_report_updates_accumulate_until_reset(self, project_root, source_file):
        output = StringIO()
        engine = HeatmapEngine(
            project_root,
            HeatmapConfig(history_size=3),
            ConsoleRenderer(output, color=False),
        )
        engine.active_file = os.path.join(str(project_root), 'app.py')
        engine.activate()
        watcher = ReportWatcher(engine.report_path, engine.handle_report_event, interval=0, debounce=0)

        for step in range(5):
            publish(engine.report_path, [1, step])
            watcher.handler.on_modified(FileModifiedEvent(str(engine.report_path)))
            assert watcher.poll() == ReportEvent.CHANGED

        # only the last three reports are kept: steps 2, 3 and 4
        assert len(engine.history) == 3
        assert engine.merged_coverage().get(engine.active_file) == (3, 9)

        engine.reset()

        assert engine.merged_coverage() is None
        assert 'No coverage data for this file.' in output.getvalue().split('=' * 70)[-2]

    def test_deleting_report_keeps_painted_lines(self, project_root, source_file):
        engine = HeatmapEngine(project_root)
        engine.active_file = os.path.join(str(project_root), 'app.py')
        publish(engine.report_path, [4, None])
        engine.activate()
        watcher = ReportWatcher(engine.report_path, engine.handle_report_event, interval=0, debounce=0)

        engine.report_path.unlink()
        watcher.handler.on_deleted(FileDeletedEvent(str(engine.report_path)))

        assert watcher.poll() == ReportEvent.DELETED
        assert engine.render().bucket_of(0) == 5

    def test_changed_file_length_drops_older_runs(self, project_root, source_file):
        engine = HeatmapEngine(project_root)
        engine.active_file = os.path.join(str(project_root), 'app.py')
        engine.activate()

        publish(engine.report_path, [7, 7])
        engine.refresh()
        publish(engine.report_path, [1, 1, 1])
        engine.refresh()

        assert engine.merged_coverage().get(engine.active_file) == (1, 1, 1)


@pytest.mark.medium
class TestObservedReport:
    """A running observer picks up reports written to disk."""

    def test_atomic_write_is_dispatched_once(self, project_root, source_file):
        engine = HeatmapEngine(project_root)
        engine.active_file = os.path.join(str(project_root), 'app.py')
        engine.activate()
        watcher = ReportWatcher(engine.report_path, engine.handle_report_event, debounce=0.2)
        watcher.start()
        try:
            write_report(engine.report_path, {'app.py': {'lines': [2, 3]}})

            event = watcher.poll(timeout=5)
        finally:
            watcher.stop()

        assert event in (ReportEvent.CREATED, ReportEvent.CHANGED)
        assert len(engine.history) == 1
        assert engine.merged_coverage().get(engine.active_file) == (2, 3)
