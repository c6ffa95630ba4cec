"""HTML renderer for the coverage heat map.

Produces a standalone HTML page showing the source of a file with each
painted line highlighted by its intensity level.
"""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from akainaa.heatmap.palette import Palette


if TYPE_CHECKING:
    from akainaa.heatmap.bucketing import BucketAssignment


logger = logging.getLogger(__name__)


class HtmlRenderer:
    """Renderer that writes a self-contained HTML heat map.

    Attributes:
        output_path: File the page is written to on render().
        palette: Intensity levels; one CSS class is emitted per level.
    """

    def __init__(self, output_path: Path, palette: Palette | None = None) -> None:
        """Initialize the HTML renderer.

        Args:
            output_path: Path of the HTML file to write.
            palette: Intensity levels. Defaults to Palette().
        """
        self.output_path = output_path
        self.palette = palette or Palette()

    def render(self, file_path: str, assignment: BucketAssignment) -> None:
        """Write the heat map of one file to output_path."""
        try:
            source = Path(file_path).read_text(encoding='utf-8', errors='replace')
        except OSError as exc:
            logger.warning('Cannot read %s: %s', file_path, exc)
            page = self.to_html(file_path, '', assignment, notice=f'Cannot read {file_path}: {exc.strerror or exc}')
        else:
            page = self.to_html(file_path, source, assignment)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(page, encoding='utf-8')
        logger.info('Wrote heat map of %s to %s', file_path, self.output_path)

    def to_html(
        self,
        file_path: str,
        source: str,
        assignment: BucketAssignment,
        notice: str | None = None,
    ) -> str:
        """Convert a file's source and assignment to an HTML document.

        Args:
            file_path: Path shown in the title.
            source: The file's source text.
            assignment: Bucket assignment of the file's lines.
            notice: Message shown above the source instead of the default one.

        Returns:
            Complete HTML document as a string.
        """
        title = html.escape(file_path)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>akainaa: {title}</title>
    <style>
        {self._get_styles()}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title}</h1>
        {self._render_source(source, assignment, notice)}
    </div>
</body>
</html>"""

    def _get_styles(self) -> str:
        """Get embedded CSS styles, one rule per intensity level."""
        levels = '\n'.join(
            f'        .heat-{level.index} {{ background-color: rgba(255, 0, 0, {level.opacity}); }}'
            for level in self.palette
        )
        return f"""
        * {{ box-sizing: border-box; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
            color: #333;
            background: #f5f5f5;
            margin: 0;
            padding: 20px;
        }}
        .container {{
            max-width: 1200px;
            margin: 0 auto;
            background: white;
            padding: 30px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }}
        h1 {{ color: #2c3e50; margin-top: 0; font-size: 1.2em; }}
        table {{ width: 100%; border-collapse: collapse; font-family: monospace; }}
        td {{ padding: 0 8px; white-space: pre; }}
        td.lineno {{ color: #999; text-align: right; user-select: none; width: 1%; }}
        .no-results {{ text-align: center; color: #666; padding: 20px; }}
{levels}
        """

    def _render_source(self, source: str, assignment: BucketAssignment, notice: str | None = None) -> str:
        """Render the source table."""
        levels = assignment.line_map()
        rows = '\n'.join(
            self._render_line(line_number, text, levels.get(line_number))
            for line_number, text in enumerate(source.splitlines())
        )
        if notice is None and assignment.is_empty:
            notice = 'No coverage data for this file.'
        banner = f'<div class="no-results">{html.escape(notice)}</div>' if notice else ''
        return f"""
        {banner}
        <table>
            <tbody>
{rows}
            </tbody>
        </table>
        """

    def _render_line(self, line_number: int, text: str, bucket: int | None) -> str:
        """Render a single source line."""
        row_class = '' if bucket is None else f' class="heat-{bucket}"'
        return f'                <tr{row_class}><td class="lineno">{line_number + 1}</td><td>{html.escape(text)}</td></tr>'
