"""Watcher for the coverage report file.

A watchdog observer watches the report's directory and queues the changes
that touch the report itself. The callback never runs on the observer
thread: poll() and run() drain the queue on the calling thread, so one
pipeline run always finishes before the next one starts.

Writing a report usually produces a burst of events (create, truncate,
write, or a rename onto the old file). Events that arrive within the
debounce window are folded into one.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
import logging
import os
import queue
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from watchdog.events import FileSystemEvent


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_DEBOUNCE = 0.1
MAX_QUEUE_SIZE = 1000
THREAD_JOIN_TIMEOUT = 5.0


class ReportEvent(Enum):
    """Change observed on the report file."""

    CREATED = 'created'
    CHANGED = 'changed'
    DELETED = 'deleted'


def coalesce(first: ReportEvent, later: ReportEvent) -> ReportEvent:
    """Fold two consecutive events on the report into one.

    A create followed by writes is still a create; otherwise the later
    event wins.
    """
    if first is ReportEvent.CREATED and later is ReportEvent.CHANGED:
        return ReportEvent.CREATED
    return later


def _real(path: str | bytes) -> str:
    return os.path.normcase(os.path.realpath(os.fsdecode(path)))


class _ReportHandler(FileSystemEventHandler):
    """Translate watchdog events on one file into queued ReportEvents."""

    def __init__(self, path: Path, events: queue.Queue[ReportEvent]) -> None:
        super().__init__()
        self._path = _real(str(path))
        self._events = events

    def _matches(self, path: str | bytes) -> bool:
        return _real(path) == self._path

    def _put(self, event: ReportEvent) -> None:
        try:
            self._events.put_nowait(event)
        except queue.Full:
            logger.warning('Report event queue full, dropping %s event', event.value)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._put(ReportEvent.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._put(ReportEvent.CHANGED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._put(ReportEvent.DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        # Atomic writers rename a temporary file onto the report.
        if self._matches(event.dest_path):
            self._put(ReportEvent.CHANGED)
        elif self._matches(event.src_path):
            self._put(ReportEvent.DELETED)


class ReportWatcher:
    """Watch a single file and invoke a callback for each change.

    Attributes:
        path: The watched file.
        interval: Longest time poll() blocks in run() before checking for stop().
        debounce: Quiet period that ends a burst of events.
        handler: The watchdog handler feeding the event queue.
    """

    def __init__(
        self,
        path: Path,
        callback: Callable[[ReportEvent], object],
        interval: float = DEFAULT_POLL_INTERVAL,
        debounce: float = DEFAULT_DEBOUNCE,
    ) -> None:
        """Prepare the watcher; nothing is observed until start().

        Args:
            path: File to watch.
            callback: Called with the ReportEvent for every detected change.
            interval: Seconds run() waits for an event before checking for stop().
            debounce: Seconds without events that end a burst.
        """
        self.path = path
        self.interval = interval
        self.debounce = debounce
        self._callback = callback
        self._events: queue.Queue[ReportEvent] = queue.Queue(maxsize=MAX_QUEUE_SIZE)
        self._deferred: deque[Callable[[], object]] = deque()
        self.handler = _ReportHandler(path, self._events)
        self._observer: Observer | None = None
        self._stopped = False

    @property
    def is_running(self) -> bool:
        """Whether the observer thread is watching the report."""
        return self._observer is not None

    def start(self) -> None:
        """Start observing the report's directory.

        The directory is created when missing, since the report usually
        lives in a scratch directory the test run creates.
        """
        if self._observer is not None:
            return

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        observer = Observer()
        observer.schedule(self.handler, str(directory), recursive=False)
        observer.start()
        self._observer = observer
        self._stopped = False
        logger.debug('Watching %s', self.path)

    def stop(self) -> None:
        """Stop the observer and make run() return after the current event."""
        self._stopped = True
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=THREAD_JOIN_TIMEOUT)
            logger.debug('Stopped watching %s', self.path)

    def call_soon(self, action: Callable[[], object]) -> None:
        """Run action on the polling thread before the next event is dispatched.

        Only appends to a deque, so it is safe to call from a signal handler.
        """
        self._deferred.append(action)

    def _run_deferred(self) -> None:
        while self._deferred:
            self._deferred.popleft()()

    def poll(self, timeout: float = 0) -> ReportEvent | None:
        """Wait up to timeout seconds for a change and dispatch it.

        Deferred actions run first. A burst of queued events is folded into
        one event, which is passed to the callback.

        Returns:
            The event that was dispatched, or None.
        """
        self._run_deferred()
        try:
            event = self._events.get(timeout=timeout) if timeout > 0 else self._events.get_nowait()
        except queue.Empty:
            return None

        while True:
            try:
                later = self._events.get(timeout=self.debounce) if self.debounce > 0 else self._events.get_nowait()
            except queue.Empty:
                break
            event = coalesce(event, later)

        self._run_deferred()
        logger.debug('Report %s %s', self.path, event.value)
        self._callback(event)
        return event

    def run(self, max_events: int | None = None) -> None:
        """Dispatch events until stop() is called or max_events were handled."""
        self.start()
        handled = 0
        try:
            while not self._stopped:
                if self.poll(timeout=self.interval) is None:
                    continue
                handled += 1
                if max_events is not None and handled >= max_events:
                    break
        finally:
            self.stop()
