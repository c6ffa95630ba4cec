"""Allow running akainaa with ``python -m akainaa``."""

from __future__ import annotations

import sys

from akainaa.cli import main


sys.exit(main())
