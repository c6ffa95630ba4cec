"""Per-line execution counting for producing coverage reports.

The LineCounter installs a trace function that counts every executed line
of the files under a project root. to_report() turns the counts into the
report format read by the ingestor: one array per file, indexed by
zero-based line number, holding the count for executable lines and null
for lines that cannot execute.

Example:
    Count the lines executed by a function call::

        counter = LineCounter(Path('.'))
        counter.start()
        run_workload()
        counter.stop()
        write_report(Path('tmp/coverage.json'), counter.to_report())
"""

from __future__ import annotations

from collections import Counter, defaultdict
from fnmatch import fnmatch
import json
import logging
import os
from pathlib import Path
import sys
import tempfile
import threading
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import CodeType, FrameType


logger = logging.getLogger(__name__)


def executable_lines(source: str, filename: str = '<source>') -> set[int]:
    """Return the one-based line numbers that carry bytecode.

    Args:
        source: Python source text.
        filename: Name used in compile errors.

    Returns:
        Set of line numbers; empty if the source does not compile.
    """
    try:
        code = compile(source, filename, 'exec', dont_inherit=True)
    except (SyntaxError, ValueError):
        logger.debug('Cannot compile %s, no executable lines known', filename)
        return set()

    lines: set[int] = set()
    pending: list[CodeType] = [code]
    while pending:
        current = pending.pop()
        lines.update(line for _, _, line in current.co_lines() if line is not None)
        pending.extend(const for const in current.co_consts if hasattr(const, 'co_lines'))
    return lines


class LineCounter:
    """Counts line executions for files under a root directory.

    A trace function that was installed before start() keeps receiving
    every event.

    Attributes:
        root: Only files below this directory are counted.
        exclude: Glob patterns, matched against root-relative POSIX paths.
    """

    def __init__(self, root: Path, exclude: Iterable[str] = ()) -> None:
        """Create a stopped counter.

        Args:
            root: Project root.
            exclude: Glob patterns of files to skip.
        """
        self.root = root.resolve()
        self.exclude = tuple(exclude)
        self._counts: defaultdict[str, Counter[int]] = defaultdict(Counter)
        self._tracked: dict[str, str | None] = {}
        self._previous_trace: Any = None
        self._previous_thread_trace: Any = None
        self._owner_thread: int | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Return True while the trace function is installed."""
        return self._running

    def start(self) -> None:
        """Install the trace function for this and newly started threads."""
        if self._running:
            return
        self._previous_trace = sys.gettrace()
        self._previous_thread_trace = threading.gettrace()
        self._owner_thread = threading.get_ident()
        self._running = True
        threading.settrace(self._trace_call)
        sys.settrace(self._trace_call)

    def stop(self) -> None:
        """Restore the trace functions that were active before start().

        Threads started while the counter ran keep its trace function until
        they exit; from here on it only forwards to the previous tracer and
        records nothing.
        """
        if not self._running:
            return
        self._running = False
        sys.settrace(self._previous_trace)
        threading.settrace(self._previous_thread_trace)

    def counts(self) -> dict[str, dict[int, int]]:
        """Return the recorded counts as {absolute path: {line: count}}."""
        return {filename: dict(lines) for filename, lines in self._counts.items()}

    def to_report(self) -> dict[str, dict[str, list[int | None]]]:
        """Build a coverage report from the recorded counts.

        Returns:
            Mapping of root-relative POSIX path to {"lines": [...]}.
        """
        report: dict[str, dict[str, list[int | None]]] = {}
        for filename, counts in sorted(self._counts.items()):
            path = Path(filename)
            try:
                source = path.read_text(encoding='utf-8')
            except OSError as exc:
                logger.warning('Skipping %s in coverage report: %s', filename, exc)
                continue

            total = len(source.splitlines())
            lines: list[int | None] = [None] * total
            for line_number in executable_lines(source, filename):
                if 1 <= line_number <= total:
                    lines[line_number - 1] = 0
            for line_number, count in counts.items():
                if 1 <= line_number <= total:
                    lines[line_number - 1] = count

            report[path.relative_to(self.root).as_posix()] = {'lines': lines}
        return report

    def _resolve_tracked(self, filename: str) -> str | None:
        """Return the absolute path to record a code filename under, or None to skip it."""
        if filename.startswith('<'):
            return None
        path = Path(filename)
        if not path.is_absolute():
            path = Path.cwd() / path
        path = path.resolve()
        if not path.is_relative_to(self.root) or not path.is_file():
            return None
        relative = path.relative_to(self.root).as_posix()
        if any(fnmatch(relative, pattern) for pattern in self.exclude):
            return None
        return str(path)

    def _previous_for_current_thread(self) -> Any:
        if threading.get_ident() == self._owner_thread:
            return self._previous_trace
        return self._previous_thread_trace

    def _trace_call(self, frame: FrameType, event: str, arg: Any) -> Any:
        previous = self._previous_for_current_thread()
        local_previous = previous(frame, event, arg) if previous is not None else None
        if not self._running:
            return local_previous

        filename = frame.f_code.co_filename
        if filename not in self._tracked:
            self._tracked[filename] = self._resolve_tracked(filename)
        tracked = self._tracked[filename]
        if tracked is None:
            return local_previous
        counts = self._counts[tracked]

        def trace_line(frame: FrameType, event: str, arg: Any) -> Any:
            nonlocal local_previous
            if local_previous is not None:
                local_previous = local_previous(frame, event, arg)
            if not self._running:
                return local_previous
            if event == 'line':
                counts[frame.f_lineno] += 1
            return trace_line

        return trace_line


def write_report(path: Path, report: dict[str, Any]) -> None:
    """Write a report as JSON, replacing the previous file atomically.

    Args:
        path: Report location; parent directories are created.
        report: The report mapping.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=path.parent, suffix='.tmp', delete=False) as f:
        json.dump(report, f)
    os.replace(f.name, path)
    logger.info('Wrote coverage report for %d files to %s', len(report), path)
