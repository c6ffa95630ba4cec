"""Renderers that paint a file's bucket assignment.

Exports:
    ConsoleRenderer: Terminal output with ANSI backgrounds
    HtmlRenderer: Standalone HTML page
"""

from __future__ import annotations

from akainaa.reporting.console import ConsoleRenderer
from akainaa.reporting.html import HtmlRenderer


__all__ = ['ConsoleRenderer', 'HtmlRenderer']
