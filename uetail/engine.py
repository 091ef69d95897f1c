"""
Consumer-side state of the viewer.

EngineState is the single owner of the scrollback, cursor, cook progress
and the active TailSession. It is driven by the UI thread only: tick()
applies worker events, the remaining methods are the user commands.
"""

import logging
from pathlib import Path

from .channel import ERROR, LINE, TICK
from .progress import ProgressTracker
from .tailer import POLL_INTERVAL, TailSession
from .targets import TargetError
from .view import MAX_LINES, ViewState

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.1     # seconds between consumer drains
TICK_BUDGET   = 1000    # max events applied per drain

THROTTLE_MSG  = 'High log throughput: throttling display to keep UI responsive'


class EngineState:
    def __init__(self, max_lines: int = MAX_LINES,
                 poll_interval: float = POLL_INTERVAL,
                 budget: int = TICK_BUDGET):
        self.view          = ViewState(max_lines)
        self.tracker       = ProgressTracker()
        self.poll_interval = poll_interval
        self.budget        = budget
        self.session: TailSession | None = None
        self.current_name: str | None = None
        self.current_kind: str | None = None
        self.status        = ''

    @property
    def progress(self):
        return self.tracker.state

    @property
    def cursor(self):
        return self.view.cursor

    # Session lifecycle

    def _retire(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def tail_file(self, path, name: str | None = None, kind: str = 'file',
                  from_start: bool = False) -> TailSession:
        path = Path(path)
        # the old worker must be gone before the new one exists
        self._retire()
        self.view.reset()
        self.tracker.reset()
        self.current_name = name or path.name
        self.current_kind = kind
        self.status       = f'Watching: {path}'
        self.session = TailSession(path, self.poll_interval,
                                   from_start=from_start).start()
        return self.session

    def select_target(self, target) -> bool:
        # Returns False (and leaves the running session alone) on a bad target.
        try:
            log_path = target.log_path()
        except TargetError as exc:
            logger.warning('cannot select %r: %s', target, exc)
            self.status = str(exc)
            return False
        self.tail_file(log_path, target.display_name, target.kind)
        return True

    def back_to_selection(self) -> None:
        self._retire()
        self.view.reset()
        self.tracker.reset()
        self.current_name = None
        self.current_kind = None
        self.status       = ''

    def close(self) -> None:
        self._retire()

    # Event application

    def apply(self, kind: str, payload) -> None:
        if kind == LINE:
            self.tracker.update(payload.raw_text)
            self.view.append(payload)
        elif kind == ERROR:
            self.status = payload
        elif kind == TICK:
            self.status = 'Log file restarted, reading from the beginning'

    def tick(self, budget: int | None = None) -> int:
        """
        Drain and apply at most *budget* queued events. Returns the count.

        When the budget is used up the rest stays queued for the next tick
        and the status line says so.
        """
        if self.session is None:
            return 0
        budget = self.budget if budget is None else budget
        events = self.session.events.drain(budget)
        lines  = []
        for kind, payload in events:
            if kind == LINE:
                self.tracker.update(payload.raw_text)
                lines.append(payload)
            else:
                if lines:
                    self.view.extend(lines)
                    lines = []
                self.apply(kind, payload)
        if lines:
            self.view.extend(lines)
        if len(events) >= budget:
            self.status = THROTTLE_MSG
        return len(events)

    # User commands

    def clear(self) -> None:
        if self.session is not None:
            self.session.reset()
            # lines read before the reset must not come back on the next tick
            self.session.events.discard()
        self.view.clear()

    def scroll(self, delta: int) -> None:
        self.view.scroll(delta)

    def set_filter(self, category: str | None) -> None:
        self.view.set_filter(category)

    def click(self, row: int, col: int, height: int) -> str | None:
        return self.view.hit_test(row, col, height)
