"""Mapping merged line counts to discrete intensity buckets.

The hottest line of a file defines the scale. Counts are divided into
num_buckets equal bands of the range [0, max_executed):

    max_executed = max(max(counts), floor) + 1
    bucket = count * num_buckets // max_executed

The floor keeps the divisor from collapsing for files with only a few hits,
where every covered line would otherwise land in the top bucket. Lines with
no data and lines that were never executed are not painted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from akainaa.config import DEFAULT_FLOOR, DEFAULT_NUM_BUCKETS


if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from akainaa.coverage.snapshot import ExecutedCount


@dataclass(frozen=True)
class BucketAssignment:
    """Lines of one file partitioned into ordered intensity buckets.

    Bucket 0 is the faintest, the last bucket the strongest.

    Attributes:
        buckets: One sorted tuple of zero-based line numbers per bucket.
    """

    buckets: tuple[tuple[int, ...], ...]

    @classmethod
    def empty(cls, num_buckets: int = DEFAULT_NUM_BUCKETS) -> BucketAssignment:
        """Return an assignment with num_buckets empty buckets."""
        return cls(tuple(() for _ in range(num_buckets)))

    @property
    def num_buckets(self) -> int:
        """Return the number of buckets."""
        return len(self.buckets)

    @property
    def is_empty(self) -> bool:
        """Return True if no line is in any bucket."""
        return not any(self.buckets)

    def bucket_of(self, line_number: int) -> int | None:
        """Return the bucket a line belongs to, or None if it is not painted."""
        for index, lines in enumerate(self.buckets):
            if line_number in lines:
                return index
        return None

    def line_map(self) -> dict[int, int]:
        """Return a mapping of line number to bucket index."""
        return {line: index for index, lines in enumerate(self.buckets) for line in lines}

    def ranges(self, index: int) -> list[tuple[int, int]]:
        """Collapse a bucket's lines into contiguous inclusive ranges.

        Args:
            index: Bucket index.

        Returns:
            List of (first_line, last_line) tuples in ascending order.
        """
        result: list[tuple[int, int]] = []
        for line in self.buckets[index]:
            if result and result[-1][1] == line - 1:
                result[-1] = (result[-1][0], line)
            else:
                result.append((line, line))
        return result

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        return iter(self.buckets)


def max_executed(line_coverage: Sequence[ExecutedCount], floor: int = DEFAULT_FLOOR) -> int:
    """Return the exclusive upper bound of the bucketing scale."""
    return max([count for count in line_coverage if count is not None] + [floor]) + 1


def assign(
    line_coverage: Sequence[ExecutedCount],
    num_buckets: int = DEFAULT_NUM_BUCKETS,
    floor: int = DEFAULT_FLOOR,
) -> BucketAssignment:
    """Assign every executed line of a file to an intensity bucket.

    Args:
        line_coverage: Merged per-line counts, None for lines without data.
        num_buckets: Number of intensity levels.
        floor: Lower bound for the largest count used as the scale.

    Returns:
        The BucketAssignment; zero and None counts are left out.

    Raises:
        ValueError: If num_buckets is less than 1 or floor is negative.
    """
    if num_buckets < 1:
        msg = f'num_buckets must be at least 1, got {num_buckets}'
        raise ValueError(msg)
    if floor < 0:
        msg = f'floor must not be negative, got {floor}'
        raise ValueError(msg)

    scale = max_executed(line_coverage, floor)
    buckets: list[list[int]] = [[] for _ in range(num_buckets)]

    for line_number, count in enumerate(line_coverage):
        if not count:
            continue
        buckets[count * num_buckets // scale].append(line_number)

    return BucketAssignment(tuple(tuple(lines) for lines in buckets))
