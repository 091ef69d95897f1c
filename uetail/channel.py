"""
Messages exchanged between a tail worker and the UI thread.

Worker -> UI travels over an EventChannel; UI -> worker over a control
queue carrying RESET. Both are unbounded SimpleQueues: the producer never
blocks and never drops, the consumer limits itself with a per-tick budget.
"""

import queue as _queue

# Event kinds
LINE  = 'line'    # payload: LogLine
ERROR = 'error'   # payload: str
TICK  = 'tick'    # payload: None; the worker restarted from byte 0

# Control commands
RESET = 'reset'   # skip to the current end of file and drop the carry


class EventChannel:
    """
    Queue of (kind, payload) tuples.

    put() may be called from any thread; drain() must only be called from the
    consumer thread.
    """

    def __init__(self):
        self._q = _queue.SimpleQueue()

    def put(self, kind: str, payload=None) -> None:
        self._q.put((kind, payload))

    def drain(self, budget: int) -> list:
        # Return at most *budget* events, oldest first; the rest stay queued.
        out = []
        while len(out) < budget:
            try:
                out.append(self._q.get_nowait())
            except _queue.Empty:
                break
        return out

    def discard(self) -> int:
        # Drop everything queued so far. Returns the number of events dropped.
        dropped = 0
        while True:
            try:
                self._q.get_nowait()
            except _queue.Empty:
                return dropped
            dropped += 1

    def empty(self) -> bool:
        return self._q.empty()

    def qsize(self) -> int:
        return self._q.qsize()
