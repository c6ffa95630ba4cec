"""Folding a snapshot history into one cumulative coverage view.

Snapshots are visited newest to oldest. The newest snapshot that mentions a
file seeds that file's merged counts; older snapshots are then added line by
line. An older snapshot whose line count differs is assumed to describe an
earlier version of the file and is skipped for that file only.

When either side has no data for a line (None), the older value replaces the
accumulated one instead of being added, so a run of sums is restarted by a
missing entry on either side.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from akainaa.coverage.history import SnapshotHistory
from akainaa.coverage.snapshot import copy_lines


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from akainaa.coverage.snapshot import ExecutedCount, LineCoverage, Snapshot


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedCoverage:
    """Cumulative per-line coverage across a history window.

    Attributes:
        files: Mapping of file path to merged line coverage.
    """

    files: Mapping[str, LineCoverage]

    def get(self, file_path: str) -> LineCoverage | None:
        """Return the merged line coverage for a file, or None if unknown."""
        return self.files.get(file_path)

    def paths(self) -> Iterator[str]:
        """Iterate over the merged file paths."""
        return iter(self.files)

    def __contains__(self, file_path: object) -> bool:
        return file_path in self.files

    def __len__(self) -> int:
        return len(self.files)


def merge_lines(accumulated: list[ExecutedCount], older: Sequence[ExecutedCount]) -> None:
    """Add an older snapshot's counts into the accumulated counts in place.

    Both sequences must have the same length.
    """
    for index, count in enumerate(older):
        current = accumulated[index]
        if count is None or current is None:
            accumulated[index] = count
        else:
            accumulated[index] = current + count


def compute(history: SnapshotHistory | Sequence[Snapshot]) -> MergedCoverage | None:
    """Merge a history of snapshots into one coverage view.

    Args:
        history: A SnapshotHistory, or snapshots ordered oldest-first.

    Returns:
        The merged coverage, or None if there are no snapshots. The history
        and its snapshots are left untouched.
    """
    if isinstance(history, SnapshotHistory):
        snapshots = history.to_ordered_sequence()
    else:
        snapshots = tuple(history)

    if not snapshots:
        return None

    merged: dict[str, list[ExecutedCount]] = {}

    for snapshot in reversed(snapshots):
        for file_path, lines in snapshot.files.items():
            accumulated = merged.get(file_path)
            if accumulated is None:
                merged[file_path] = copy_lines(lines)
                continue

            if len(lines) != len(accumulated):
                logger.debug(
                    'Skipping older coverage for %s: %d lines, expected %d',
                    file_path,
                    len(lines),
                    len(accumulated),
                )
                continue

            merge_lines(accumulated, lines)

    return MergedCoverage({file_path: tuple(lines) for file_path, lines in merged.items()})
