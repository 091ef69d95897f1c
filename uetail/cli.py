"""
uetail - live viewer for Unreal editor / packaged build logs

Usage:    uetail                       pick a target from projects.json
          uetail --file PATH           tail one log file directly

Keys:
  H         help
  S         back to target selection
  C         clear output and restart tail at end of file
  F         clear category filter
  T         toggle timestamps
  ↑↓ PgUp PgDn Home End   scroll
  Q / Esc   quit

Mouse:    click a category token (e.g. LogRenderer:) to show only that
          category; the scroll wheel scrolls three lines.
"""

import argparse
import logging
import os
import sys

from . import discovery
from .app import TailApp, run
from .config import ConfigError, load_config
from .engine import TICK_BUDGET, EngineState
from .tailer import POLL_INTERVAL
from .view import MAX_LINES

logger = logging.getLogger(__name__)


def _positive_int(s: str) -> int:
    n = int(s)
    if n < 1:
        raise argparse.ArgumentTypeError(f'must be at least 1, got {n}')
    return n


def _positive_float(s: str) -> float:
    f = float(s)
    if f <= 0:
        raise argparse.ArgumentTypeError(f'must be positive, got {f}')
    return f


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog='uetail',
        description='uetail - live Unreal log viewer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__)
    ap.add_argument('-c', '--config', metavar='PATH',
                    help='projects.json to use (default: ./projects.json)')
    ap.add_argument('-f', '--file', metavar='PATH',
                    help='tail this log file directly, skipping selection')
    ap.add_argument('--no-discover', action='store_true',
                    help='do not look for running editors')
    ap.add_argument('--log-file', metavar='PATH',
                    default=os.environ.get('UETAIL_LOG'),
                    help='write diagnostic log to PATH (env: UETAIL_LOG)')
    ap.add_argument('-v', '--verbose', action='store_true',
                    help='debug-level diagnostic log')
    ap.add_argument('--poll-interval', type=_positive_float, default=POLL_INTERVAL,
                    metavar='SECS', help=f'file poll interval (default {POLL_INTERVAL})')
    ap.add_argument('--budget', type=_positive_int, default=TICK_BUDGET,
                    metavar='N', help=f'max lines applied per UI tick (default {TICK_BUDGET})')
    ap.add_argument('--max-lines', type=_positive_int, default=MAX_LINES,
                    metavar='N', help=f'scrollback size (default {MAX_LINES})')
    return ap


def setup_logging(path: str | None, verbose: bool = False) -> None:
    # The terminal belongs to urwid: log to a file or nowhere.
    if path:
        handler = logging.FileHandler(path, encoding='utf-8')
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)-7s %(threadName)s %(name)s: %(message)s'))
    else:
        handler = logging.NullHandler()
    root = logging.getLogger('uetail')
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        sys.exit(f'Error: {exc}')

    discover = not args.no_discover
    if discover:
        try:
            discovery.refresh(cfg)
        except Exception as exc:
            logger.warning('initial editor discovery failed: %s', exc)

    if args.file and not os.path.isfile(args.file):
        sys.exit(f'Error: {args.file!r} not found.')

    engine = EngineState(max_lines=args.max_lines,
                         poll_interval=args.poll_interval,
                         budget=args.budget)
    app = TailApp(cfg, engine, discover=discover)
    if args.file:
        app.open_file(args.file)
    run(app)


if __name__ == '__main__':
    main()
