"""akainaa: a line-level coverage heat map.

Paint the hot lines red. See where your program actually spends its time.

akainaa aggregates periodically-refreshed coverage reports over a rolling
history window and turns the merged per-line execution counts into discrete
intensity levels that a renderer paints over the source.

Example:
    Record execution counts while running the test suite::

        $ pytest --akainaa

    Watch the report and keep a heat map of one file up to date::

        $ akainaa watch src/app/models.py
"""

from __future__ import annotations


__version__ = '0.1.0'
__all__ = ['__version__']
