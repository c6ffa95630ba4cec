"""Snapshot value type holding one ingested coverage report.

A Snapshot maps absolute file paths to per-line execution counts. Line
coverage is stored as tuples, so a Snapshot cannot be changed once it has
been created. Working copies for merging are made with Snapshot.copy().

Example:
    >>> snapshot = Snapshot({'/src/app.py': [1, None, 0]})
    >>> snapshot.lines('/src/app.py')
    (1, None, 0)
    >>> snapshot.copy()
    {'/src/app.py': [1, None, 0]}
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, TypeAlias


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


ExecutedCount: TypeAlias = int | None
LineCoverage: TypeAlias = tuple[ExecutedCount, ...]


def copy_lines(lines: Iterable[ExecutedCount]) -> list[ExecutedCount]:
    """Return an independent, mutable copy of a line coverage sequence."""
    return list(lines)


class Snapshot:
    """Immutable mapping from file path to that file's line coverage.

    Attributes:
        files: Read-only view of the path to line coverage mapping.
    """

    __slots__ = ('_files',)

    def __init__(self, files: Mapping[str, Iterable[ExecutedCount]] | None = None) -> None:
        """Create a snapshot.

        Args:
            files: Mapping of file path to per-line counts (None marks a line
                   without data). The sequences are copied.
        """
        self._files: dict[str, LineCoverage] = {path: tuple(lines) for path, lines in (files or {}).items()}

    @property
    def files(self) -> Mapping[str, LineCoverage]:
        """Return a read-only view of the file mapping."""
        return MappingProxyType(self._files)

    def lines(self, file_path: str) -> LineCoverage | None:
        """Return the line coverage for a file, or None if it is not in the snapshot."""
        return self._files.get(file_path)

    def paths(self) -> Iterator[str]:
        """Iterate over the file paths in the snapshot."""
        return iter(self._files)

    def copy(self) -> dict[str, list[ExecutedCount]]:
        """Deep-copy the snapshot into plain, mutable containers.

        Returns:
            A new dict with a new list per file; changing it never affects
            this snapshot.
        """
        return {path: copy_lines(lines) for path, lines in self._files.items()}

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._files == other._files

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._files.items())))

    def __repr__(self) -> str:
        return f'Snapshot(files={len(self._files)})'
