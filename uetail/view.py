"""
Scrollback, category filter and viewport addressing.

Rendering and mouse hit-testing both go through visible_slice() and
line_segments(), so a click always resolves to the line and column range
that was actually drawn.
"""

from .parser import LogLine

MAX_LINES = 20_000


class ScrollbackBuffer:
    # Arrival-ordered lines, capped; overflow is evicted from the front.

    def __init__(self, max_lines: int = MAX_LINES):
        if max_lines < 1:
            raise ValueError(f'max_lines must be positive, got {max_lines}')
        self.max_lines = max_lines
        self._lines: list = []

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, idx):
        return self._lines[idx]

    def __iter__(self):
        return iter(self._lines)

    def extend(self, lines) -> int:
        # Append and trim. Returns how many old lines were evicted.
        self._lines.extend(lines)
        overflow = len(self._lines) - self.max_lines
        if overflow > 0:
            del self._lines[:overflow]
            return overflow
        return 0

    def append(self, line: LogLine) -> int:
        return self.extend((line,))

    def clear(self) -> None:
        self._lines.clear()


class ViewCursor:
    def __init__(self):
        self.scroll_from_bottom = 0      # 0 = pinned to the live tail
        self.category_filter: str | None = None

    def __repr__(self):
        return (f'ViewCursor(scroll_from_bottom={self.scroll_from_bottom}, '
                f'category_filter={self.category_filter!r})')


def apply_filter(lines, category: str | None) -> list:
    if category is None:
        return list(lines)
    return [l for l in lines if l.category == category]


def slice_bounds(total: int, height: int, scroll_from_bottom: int) -> tuple[int, int]:
    end   = max(0, total - scroll_from_bottom)
    start = max(0, end - max(0, height))
    return start, end


def visible_slice(filtered: list, height: int, scroll_from_bottom: int) -> list:
    start, end = slice_bounds(len(filtered), height, scroll_from_bottom)
    return filtered[start:end]


def line_segments(line: LogLine, show_timestamp: bool) -> list:
    """
    Split a line into the (kind, text) pieces the log body draws, in order.

    kind is one of 'ts', 'cat', 'sep', 'msg'. Lines without any parsed
    structure are drawn as their raw text.
    """
    segs = []
    if show_timestamp and line.timestamp is not None:
        segs.append(('ts', f'[{line.timestamp}] '))
    if line.category is not None:
        segs.append(('cat', f'{line.category}:'))
        segs.append(('sep', ' '))
    segs.append(('msg', line.message if line.structured else line.raw_text))
    return segs


def category_span(line: LogLine, show_timestamp: bool) -> tuple[int, int] | None:
    # Column range [start, end) of the "Category:" token, or None.
    pos = 0
    for kind, text in line_segments(line, show_timestamp):
        if kind == 'cat':
            return pos, pos + len(text)
        pos += len(text)
    return None


class ViewState:
    """Everything the log body needs to draw itself; UI thread only."""

    def __init__(self, max_lines: int = MAX_LINES):
        self.buffer         = ScrollbackBuffer(max_lines)
        self.cursor         = ViewCursor()
        self.show_timestamp = False

    # Mutation

    def extend(self, lines) -> int:
        evicted = self.buffer.extend(lines)
        # keep a scrolled-back window on the same lines
        if evicted and self.cursor.scroll_from_bottom > 0:
            self.cursor.scroll_from_bottom = max(
                0, self.cursor.scroll_from_bottom - evicted)
        return evicted

    def append(self, line: LogLine) -> int:
        return self.extend((line,))

    def clear(self) -> None:
        self.buffer.clear()
        self.cursor.scroll_from_bottom = 0

    def reset(self) -> None:
        self.clear()
        self.cursor.category_filter = None

    def scroll(self, delta: int) -> None:
        # Positive delta moves back in history.
        limit = len(self.filtered())
        sfb   = self.cursor.scroll_from_bottom + delta
        self.cursor.scroll_from_bottom = max(0, min(sfb, limit))

    def scroll_to_top(self) -> None:
        self.cursor.scroll_from_bottom = len(self.filtered())

    def scroll_to_bottom(self) -> None:
        self.cursor.scroll_from_bottom = 0

    def set_filter(self, category: str | None) -> None:
        self.cursor.category_filter = category
        if category is not None:
            self.cursor.scroll_from_bottom = 0

    def toggle_timestamp(self) -> None:
        self.show_timestamp = not self.show_timestamp

    # Queries

    def filtered(self) -> list:
        return apply_filter(self.buffer, self.cursor.category_filter)

    def visible(self, height: int) -> list:
        return visible_slice(self.filtered(), height,
                             self.cursor.scroll_from_bottom)

    def line_at(self, row: int, height: int) -> LogLine | None:
        if row < 0 or row >= height:
            return None
        filtered   = self.filtered()
        start, end = slice_bounds(len(filtered), height,
                                  self.cursor.scroll_from_bottom)
        idx = start + row
        if idx >= end:
            return None
        return filtered[idx]

    def hit_test(self, row: int, col: int, height: int) -> str | None:
        """
        Resolve a click at (row, col) of a body *height* rows tall.

        When the click lands on a category token the filter is set to that
        category, the view jumps back to the live tail and the category is
        returned. Anything else is a no-op returning None.
        """
        line = self.line_at(row, height)
        if line is None or line.category is None:
            return None
        span = category_span(line, self.show_timestamp)
        if span is None or not (span[0] <= col < span[1]):
            return None
        self.set_filter(line.category)
        return line.category
