"""
Polling tail of a single log file.

TailWorker does the file work and is fully synchronous (poll_once), so it
can be driven directly in tests. TailSession runs one worker on its own
thread and owns the channels and the stop signal; closing a session joins
its thread, so a new session never overlaps the one it replaces.
"""

import logging
import os
import queue as _queue
import threading
from pathlib import Path

from .channel import ERROR, LINE, RESET, TICK, EventChannel
from .decoder import LineDecoder
from .parser import parse_line

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.15   # seconds between stat() calls


def _creation_marker(st: os.stat_result):
    # Best-effort file identity: birth time where the platform reports one,
    # plus the inode number where it is meaningful. None when neither is known.
    birth = getattr(st, 'st_birthtime', None)
    ino   = (st.st_dev, st.st_ino) if st.st_ino else None
    if birth is None and ino is None:
        return None
    return birth, ino


class TailWorker:
    """
    Tail state for one path.

    Attributes:
        path:    file being tailed
        offset:  number of bytes already consumed
        decoder: holds the unterminated trailing fragment between polls
    """

    def __init__(self, path, events: EventChannel, control: _queue.SimpleQueue,
                 from_start: bool = False):
        self.path     = Path(path)
        self.events   = events
        self.control  = control
        self.decoder  = LineDecoder()
        self.offset   = 0
        self._created  = None
        self._modified = None
        self._last_error: str | None = None
        if not from_start:
            # start at EOF; old content of a long-running editor log is noise
            try:
                self.offset = self.path.stat().st_size
            except OSError:
                self.offset = 0

    # Control

    def _handle_control(self) -> None:
        try:
            cmd = self.control.get_nowait()
        except _queue.Empty:
            return
        if cmd == RESET:
            try:
                self.offset = self.path.stat().st_size
            except OSError:
                # gone; whatever appears next is read from its start
                self.offset = 0
            self.decoder.reset()

    # Polling

    def _restart(self, reason: str) -> None:
        logger.info('%s: %s, reading from start', self.path, reason)
        self.offset = 0
        self.decoder.reset()
        self.events.put(TICK)

    def _report(self, msg: str) -> None:
        logger.debug(msg)
        if msg != self._last_error:
            self._last_error = msg
            self.events.put(ERROR, msg)

    def poll_once(self) -> int:
        # One iteration of the poll loop. Returns the number of lines emitted.
        self._handle_control()

        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            # not created yet, or between delete and recreate
            self._created  = None
            self._modified = None
            return 0
        except OSError as exc:
            self._report(f'Cannot stat {self.path}: {exc}')
            return 0

        created  = _creation_marker(st)
        modified = st.st_mtime_ns
        recreated = (self._created is not None and created is not None
                     and created != self._created)
        backwards = self._modified is not None and modified < self._modified
        if recreated or backwards:
            self._restart('file recreated')
        if created is not None:
            self._created = created
        self._modified = modified

        size = st.st_size
        if size < self.offset:
            self._restart('file truncated')
        if size <= self.offset:
            return 0

        try:
            with open(self.path, 'rb') as fh:
                fh.seek(self.offset)
                data = fh.read(size - self.offset)
        except OSError as exc:
            self._report(f'Cannot read {self.path}: {exc}')
            return 0
        self._last_error = None

        # a short read (file shrank after stat) is fixed by the next truncation check
        self.offset += len(data)
        lines = self.decoder.feed(data)
        for line in lines:
            self.events.put(LINE, parse_line(line))
        return len(lines)

    def run(self, stop: threading.Event, interval: float = POLL_INTERVAL) -> None:
        while not stop.is_set():
            try:
                self.poll_once()
            except Exception as exc:
                logger.exception('tail worker for %s', self.path)
                self._report(f'Tail error: {exc}')
            stop.wait(interval)


class TailSession:
    """
    One running TailWorker bound to one path.

    The UI thread talks to the worker only through ``events`` (read) and
    reset() (write). close() signals the worker and waits for its thread.
    """

    def __init__(self, path, poll_interval: float = POLL_INTERVAL,
                 from_start: bool = False):
        self.path          = Path(path)
        self.poll_interval = poll_interval
        self.events        = EventChannel()
        self._control      = _queue.SimpleQueue()
        self._stop         = threading.Event()
        self._worker       = TailWorker(self.path, self.events, self._control,
                                        from_start=from_start)
        self._thread       = threading.Thread(
            target=self._worker.run, args=(self._stop, poll_interval),
            daemon=True, name=f'tail-{self.path.name}')

    def start(self) -> 'TailSession':
        logger.info('tail started: %s', self.path)
        self._thread.start()
        return self

    def reset(self) -> None:
        self._control.put(RESET)

    def cancel(self) -> None:
        self._stop.set()

    def close(self) -> None:
        # Cooperative: the worker notices the stop flag within one poll interval.
        self.cancel()
        if self._thread.is_alive():
            self._thread.join()
        logger.info('tail stopped: %s', self.path)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.close()
        return False
