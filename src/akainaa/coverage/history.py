"""Bounded, chronological buffer of coverage snapshots."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from akainaa.config import DEFAULT_HISTORY_SIZE


if TYPE_CHECKING:
    from collections.abc import Iterator

    from akainaa.coverage.snapshot import Snapshot


class SnapshotHistory:
    """FIFO history of snapshots, oldest first.

    Pushing beyond capacity evicts exactly one snapshot, always the oldest.
    Coverage older than the window is stale and is never kept selectively.

    Example:
        >>> from akainaa.coverage.snapshot import Snapshot
        >>> history = SnapshotHistory(capacity=2)
        >>> for files in ({'a': [1]}, {'a': [2]}, {'a': [3]}):
        ...     history.push(Snapshot(files))
        >>> [s.lines('a') for s in history.to_ordered_sequence()]
        [(2,), (3,)]
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        """Create an empty history.

        Args:
            capacity: Maximum number of snapshots kept.

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            msg = f'capacity must be at least 1, got {capacity}'
            raise ValueError(msg)
        self._capacity = capacity
        self._snapshots: deque[Snapshot] = deque()

    @property
    def capacity(self) -> int:
        """Return the maximum number of snapshots kept."""
        return self._capacity

    def push(self, snapshot: Snapshot) -> None:
        """Append a snapshot, evicting the oldest one when over capacity."""
        self._snapshots.append(snapshot)
        if len(self._snapshots) > self._capacity:
            self._snapshots.popleft()

    def clear(self) -> None:
        """Remove all snapshots."""
        self._snapshots.clear()

    def is_empty(self) -> bool:
        """Return True if no snapshot is stored."""
        return not self._snapshots

    def to_ordered_sequence(self) -> tuple[Snapshot, ...]:
        """Return the snapshots oldest-first, newest-last."""
        return tuple(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(tuple(self._snapshots))
