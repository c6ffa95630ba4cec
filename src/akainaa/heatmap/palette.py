"""Fixed set of intensity levels used to paint buckets.

The palette is built once from the configured bucket count. It carries no
colour; each renderer combines a level's opacity with its own base colour.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from akainaa.config import DEFAULT_NUM_BUCKETS


if TYPE_CHECKING:
    from collections.abc import Iterator


MAX_OPACITY_STEP = 0.1


@dataclass(frozen=True)
class IntensityLevel:
    """One level of the heat map.

    Attributes:
        index: Bucket index this level paints (0 is the faintest).
        opacity: Strength of the highlight, in (0, 1].
    """

    index: int
    opacity: float


class Palette:
    """Ordered intensity levels, one per bucket.

    Example:
        >>> palette = Palette(8)
        >>> len(palette)
        8
        >>> palette[0].opacity, palette[7].opacity
        (0.1, 0.8)
    """

    def __init__(self, size: int = DEFAULT_NUM_BUCKETS) -> None:
        """Build the palette.

        Args:
            size: Number of levels.

        Raises:
            ValueError: If size is less than 1.
        """
        if size < 1:
            msg = f'palette size must be at least 1, got {size}'
            raise ValueError(msg)
        step = min(MAX_OPACITY_STEP, 1.0 / size)
        self._levels = tuple(IntensityLevel(index, round((index + 1) * step, 4)) for index in range(size))

    def __getitem__(self, index: int) -> IntensityLevel:
        return self._levels[index]

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[IntensityLevel]:
        return iter(self._levels)
