"""Snapshot aggregation for the coverage heat map.

Every time the coverage report changes it is ingested as a Snapshot and
pushed into a bounded SnapshotHistory. The history is then merged into a
single cumulative view:

    history = [run_1, run_2, ..., run_20]   # oldest first
    merged = compute(history)               # per-line sums across runs

Exports:
    Snapshot: Immutable file path to line coverage mapping
    SnapshotHistory: Bounded FIFO of snapshots
    MergedCoverage: Result of merging a history
    LoadResult, LoadStatus: Outcome of loading a report
    MalformedReportError: Raised for unparsable report content
    compute: Merge a history
    load: Load a report file
"""

from __future__ import annotations

from akainaa.coverage.history import SnapshotHistory
from akainaa.coverage.ingestor import LoadResult, LoadStatus, MalformedReportError, load
from akainaa.coverage.merge import MergedCoverage, compute
from akainaa.coverage.snapshot import Snapshot


__all__ = [
    'LoadResult',
    'LoadStatus',
    'MalformedReportError',
    'MergedCoverage',
    'Snapshot',
    'SnapshotHistory',
    'compute',
    'load',
]
