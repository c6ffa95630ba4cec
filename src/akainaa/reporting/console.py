"""Console renderer for the coverage heat map.

Prints the source of the displayed file with a gutter showing each line's
intensity level:

    ==================== akainaa: src/app/models.py ====================
        1    | import json
        2  0 | def load(path):
        3  7 |     with open(path) as f:
        4  3 |         return json.load(f)
    ====================================================================

With colour enabled the painted lines also get a red background whose
strength follows the level's opacity.
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import TYPE_CHECKING, TextIO

from akainaa.heatmap.palette import Palette


if TYPE_CHECKING:
    from akainaa.heatmap.bucketing import BucketAssignment
    from akainaa.heatmap.palette import IntensityLevel


logger = logging.getLogger(__name__)

BASE_COLOR = (255, 0, 0)
ANSI_RESET = '\x1b[0m'


def ansi_background(level: IntensityLevel) -> str:
    """Return the 24-bit ANSI background escape for a level on a black terminal."""
    red, green, blue = (round(channel * level.opacity) for channel in BASE_COLOR)
    return f'\x1b[48;2;{red};{green};{blue}m'


class ConsoleRenderer:
    """Renderer that writes the heat map of a file to the console.

    Attributes:
        output: The file-like object to write to.
        palette: Intensity levels used for colouring.
        color: Whether ANSI colours are emitted.
    """

    BORDER_CHAR = '='
    BORDER_WIDTH = 70

    def __init__(
        self,
        output: TextIO | None = None,
        palette: Palette | None = None,
        *,
        color: bool = True,
    ) -> None:
        """Initialize the console renderer.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
            palette: Intensity levels. Defaults to Palette().
            color: Emit ANSI background colours for painted lines.
        """
        self.output = output or sys.stdout
        self.palette = palette or Palette()
        self.color = color

    def render(self, file_path: str, assignment: BucketAssignment) -> None:
        """Write the heat map of one file.

        Args:
            file_path: Path of the displayed file.
            assignment: Bucket assignment of the file's lines.
        """
        self._write_header(file_path)
        try:
            source = Path(file_path).read_text(encoding='utf-8', errors='replace')
        except OSError as exc:
            logger.warning('Cannot read %s: %s', file_path, exc)
            self._write_line(f'Cannot read {file_path}: {exc.strerror or exc}')
        else:
            self._write_source(source.splitlines(), assignment)
            if assignment.is_empty:
                self._write_line('No coverage data for this file.')
        self._write_footer()
        self.output.flush()

    def _write_source(self, lines: list[str], assignment: BucketAssignment) -> None:
        """Write every source line with its gutter."""
        levels = assignment.line_map()
        width = len(str(len(lines)))
        for line_number, text in enumerate(lines):
            bucket = levels.get(line_number)
            marker = ' ' if bucket is None else str(bucket)
            gutter = f'{line_number + 1:>{width}} {marker:>2} | '
            if self.color and bucket is not None:
                self._write_line(f'{gutter}{ansi_background(self.palette[bucket])}{text}{ANSI_RESET}')
            else:
                self._write_line(f'{gutter}{text}')

    def _write_header(self, file_path: str) -> None:
        """Write the report header."""
        title = f' akainaa: {file_path} '
        border_len = max((self.BORDER_WIDTH - len(title)) // 2, 2)
        self._write_line(f'{self.BORDER_CHAR * border_len}{title}{self.BORDER_CHAR * border_len}')

    def _write_footer(self) -> None:
        """Write the report footer."""
        self._write_line(self.BORDER_CHAR * self.BORDER_WIDTH)

    def _write_line(self, text: str) -> None:
        """Write a line of text to the output."""
        self.output.write(text + '\n')
