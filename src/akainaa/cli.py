"""Command line interface for the akainaa heat map viewer.

Usage:
    akainaa show src/app.py              # print the heat map once
    akainaa watch src/app.py             # repaint whenever the report changes
    akainaa html src/app.py -o heat.html # write a standalone HTML page

While watching, sending SIGUSR1 to the process resets the history.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import signal
import sys
from typing import TYPE_CHECKING

from akainaa import __version__
from akainaa.config import load_config, merge_configs
from akainaa.engine import HeatmapEngine
from akainaa.reporting.console import ConsoleRenderer
from akainaa.reporting.html import HtmlRenderer
from akainaa.watcher import DEFAULT_POLL_INTERVAL, ReportWatcher


if TYPE_CHECKING:
    from collections.abc import Sequence

    from akainaa.engine import Renderer


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='akainaa',
        description='Show a line-level coverage heat map of a source file.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        help='Enable debug logging',
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help='Project root (default: current directory)',
    )
    parser.add_argument(
        '--report',
        default=None,
        help='Coverage report location relative to the project root (default: tmp/coverage.json)',
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    show = subparsers.add_parser('show', help='Print the heat map of a file once')
    show.add_argument('file', type=Path, help='Source file to display')
    show.add_argument('--no-color', action='store_true', help='Do not emit ANSI colours')

    watch = subparsers.add_parser('watch', help='Repaint the heat map whenever the report changes')
    watch.add_argument('file', type=Path, help='Source file to display')
    watch.add_argument('--no-color', action='store_true', help='Do not emit ANSI colours')
    watch.add_argument(
        '--interval',
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f'Seconds between checks for a stop request (default: {DEFAULT_POLL_INTERVAL})',
    )

    html = subparsers.add_parser('html', help='Write the heat map of a file as HTML')
    html.add_argument('file', type=Path, help='Source file to display')
    html.add_argument('-o', '--output', type=Path, required=True, help='HTML file to write')

    return parser


def _make_renderer(args: argparse.Namespace, engine: HeatmapEngine) -> Renderer:
    if args.command == 'html':
        return HtmlRenderer(args.output, engine.palette)
    return ConsoleRenderer(palette=engine.palette, color=not args.no_color and sys.stdout.isatty())


def _watch(engine: HeatmapEngine, interval: float) -> int:
    report_path = engine.report_path
    assert report_path is not None  # noqa: S101 - root is always set by main()
    watcher = ReportWatcher(report_path, engine.handle_report_event, interval=interval)

    # The handler may interrupt a refresh, so the reset runs from the watch loop.
    previous_handler = None
    if hasattr(signal, 'SIGUSR1'):
        previous_handler = signal.signal(
            signal.SIGUSR1,
            lambda signum, frame: watcher.call_soon(engine.reset),  # noqa: ARG005
        )

    logger.info('Watching %s (Ctrl-C to stop)', report_path)
    try:
        watcher.run()
    except KeyboardInterrupt:
        watcher.stop()
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGUSR1, previous_handler)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments, defaults to sys.argv[1:].

    Returns:
        Exit code (0 = success, 1 = malformed report, 2 = usage or configuration error).
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not args.file.is_file():
        print(f'Error: {args.file} is not a file', file=sys.stderr)
        return 2

    root = (args.root or Path.cwd()).resolve()
    try:
        config = merge_configs(load_config(root), cli_report_path=args.report)
    except ValueError as e:
        print(f'Error: invalid configuration: {e}', file=sys.stderr)
        return 2

    engine = HeatmapEngine(root, config)
    engine.renderer = _make_renderer(args, engine)
    engine.active_file = str(args.file.resolve())

    try:
        result = engine.activate()
        if result is not None and result.is_malformed:
            print(f'Error: {result.error}', file=sys.stderr)
            if args.command != 'watch':
                return 1

        if args.command == 'watch':
            return _watch(engine, args.interval)
        return 0
    finally:
        engine.dispose()


if __name__ == '__main__':
    sys.exit(main())
