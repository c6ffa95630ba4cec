"""Turning merged coverage into heat map intensity levels.

Exports:
    BucketAssignment: Lines of one file grouped by intensity
    assign: Compute a BucketAssignment from line counts
    Palette: Fixed set of intensity levels
    IntensityLevel: One level of the palette
"""

from __future__ import annotations

from akainaa.heatmap.bucketing import BucketAssignment, assign
from akainaa.heatmap.palette import IntensityLevel, Palette


__all__ = ['BucketAssignment', 'IntensityLevel', 'Palette', 'assign']
