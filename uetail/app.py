"""
urwid front end: target selection screen and the live log view.

All widgets live on the urwid main-loop thread. Tail workers never touch
them; their events are pulled by EngineState.tick() from a loop alarm.
Discovery runs on a short-lived thread and hands its result back through
a watch_pipe, the same way every other background job reaches the loop.
"""

import logging
import os
import queue as _queue
import threading
import time

import urwid

from . import discovery
from .engine import TICK_INTERVAL, EngineState
from .parser import ERROR, NORMAL, WARNING
from .view import line_segments

logger = logging.getLogger(__name__)

DISCOVERY_INTERVAL = 3.0   # seconds, selection screen only

# Palette
PALETTE = [
    # chrome
    ('hdr_project', 'light cyan',         'default'),
    ('hdr_build',   'light magenta',      'default'),
    ('hdr_filter',  'yellow',             'default'),
    ('footer',      'light gray,italics', 'default'),
    ('box',         'light gray',         'default'),
    # cook gauge
    ('cook_bar',    'light green',        'default'),
    ('cook_lbl',    'light green,bold',   'default'),
    # selection list
    ('sel',         'light gray',         'default'),
    ('sel_f',       'black',              'light gray'),
    ('sel_project', 'light cyan',         'default'),
    ('sel_build',   'light magenta',      'default'),
    ('sel_dim',     'dark gray',          'default'),
    # log lines
    ('ts',          'dark gray',          'default'),
    ('cat',         'light cyan,underline', 'default'),
    ('ln',          'white',              'default'),
    ('lw',          'yellow',             'default'),
    ('le',          'light red',          'default'),
    # help
    ('help',        'white',              'dark blue'),
]

_SEVERITY_ATTR = {NORMAL: 'ln', WARNING: 'lw', ERROR: 'le'}
_SEGMENT_ATTR  = {'ts': 'ts', 'cat': 'cat', 'sep': 'ln'}

HELP_TEXT = '\n'.join([
    'Commands:',
    '',
    ' H              Show/Hide this help',
    ' Q / Esc        Quit the app',
    ' S              Back to project/build selection',
    ' C              Clear output and restart tail',
    ' F              Clear category filter',
    ' T              Toggle timestamp',
    '',
    ' Scroll:',
    '  ↑/↓           Line up/down',
    '  PgUp/PgDn     10 lines up/down',
    '  Home/End      Go to top/bottom',
    '  Mouse wheel   3 lines up/down',
    '',
    ' Mouse click on a category (e.g., LogRenderer:) to filter',
])


def line_markup(line, show_timestamp: bool, width: int) -> list:
    # urwid markup for one log row; only the message part is ever shortened.
    out    = []
    prefix = 0
    for kind, text in line_segments(line, show_timestamp):
        if kind != 'msg':
            out.append((_SEGMENT_ATTR[kind], text))
            prefix += len(text)
            continue
        text = text.expandtabs(4)
        room = width - prefix
        if len(text) > room:
            text = text[:room - 3] + '...' if room >= 3 else text[:max(0, room)]
        if text:
            out.append((_SEVERITY_ATTR.get(line.severity, 'ln'), text))
    return out or ''


def cook_markup(progress, bar_w: int = 10) -> list:
    total = progress.total
    if total <= 0:
        return [('cook_lbl', 'COOK in progress')]
    filled = round(progress.ratio() * bar_w)
    bar    = '▓' * filled + '░' * (bar_w - filled)
    return [
        ('cook_bar', bar),
        ('cook_lbl', f' COOK {progress.percent():>3}%  '
                     f'({progress.completed} / {total} | remain {progress.remaining})'),
    ]


class LogBody(urwid.Widget):
    """
    Box widget drawing the visible slice of the engine's view state, one
    screen row per line. Rows are filled from the top; once the body is full
    the newest line sits on the last row.
    """
    _sizing = frozenset(['box'])

    def __init__(self, engine: EngineState):
        super().__init__()
        self._engine = engine

    def refresh(self) -> None:
        self._invalidate()

    def render(self, size, focus=False):
        maxcol, maxrow = size
        view  = self._engine.view
        rows  = [urwid.Text(line_markup(l, view.show_timestamp, maxcol), wrap='clip')
                 for l in view.visible(maxrow)]
        if not rows:
            return urwid.SolidCanvas(' ', maxcol, maxrow)
        return urwid.Filler(urwid.Pile(rows), valign='top').render(size, focus)

    def mouse_event(self, size, event, button, col, row, focus):
        if event != 'mouse press':
            return False
        if button == 1:
            if self._engine.click(row, col, size[1]) is not None:
                self._invalidate()
            return True
        if button in (4, 5):
            self._engine.scroll(3 if button == 4 else -3)
            self._invalidate()
            return True
        return False


def make_help_overlay(behind: urwid.Widget) -> urwid.Overlay:
    body = urwid.Filler(urwid.Text(HELP_TEXT), valign='top')
    box  = urwid.AttrMap(
        urwid.LineBox(body, title='Help (press H to close)'), 'help')
    return urwid.Overlay(
        box, behind,
        'center', ('relative', 80),
        'middle', ('relative', 80),
    )


class TailApp:
    def __init__(self, cfg, engine: EngineState, discover: bool = True):
        self.cfg       = cfg
        self.engine    = engine
        self.discover  = discover
        self.mode      = 'select'
        self.show_help = False
        self.selected  = 0

        self._loop_ref     = None
        self._tick_alarm   = None
        self._discovery_q: _queue.SimpleQueue = _queue.SimpleQueue()
        self._discovery_fd: int | None = None
        self._discovering  = False
        self._last_discovery = 0.0

        self._build_ui()

    # Build
    def _build_ui(self):
        # selection screen
        self.w_sel_walker = urwid.SimpleFocusListWalker([])
        self.w_sel_list   = urwid.ListBox(self.w_sel_walker)
        self.w_sel_footer = urwid.Text('', wrap='clip')
        self.select_frame = urwid.Frame(
            body   = urwid.AttrMap(urwid.LineBox(
                self.w_sel_list, title='Select target (Enter) - Quit: Q'), 'box'),
            footer = urwid.AttrMap(self.w_sel_footer, 'footer'),
        )
        self._rebuild_selection()

        # view screen
        self.w_title  = urwid.Text('', wrap='clip')
        self.w_right  = urwid.Text('', align='right', wrap='clip')
        self.w_header = urwid.Columns([
            ('weight', 70, self.w_title),
            ('weight', 30, self.w_right),
        ], dividechars=1)
        self.body     = LogBody(self.engine)
        self.w_footer = urwid.Text('', wrap='clip')
        self.view_frame = urwid.Frame(
            body   = urwid.AttrMap(urwid.LineBox(self.body, title='Logs'), 'box'),
            header = self.w_header,
            footer = urwid.AttrMap(self.w_footer, 'footer'),
        )

    def _rebuild_selection(self) -> None:
        if self.w_sel_walker:
            # each target is a button row followed by its path row
            self.selected = self.w_sel_list.focus_position // 2
        items = []
        for i, t in enumerate(self.cfg.targets):
            if t.kind == 'project':
                tag, attr = ' [Project] ', 'sel_project'
            else:
                tag, attr = ' [Build]   ', 'sel_build'
            title = t.display_name
            if getattr(t, 'discovered', False):
                title += '  [discovered]'
            btn = urwid.Button([tag, (attr, title)])
            urwid.connect_signal(btn, 'click', lambda _b, idx=i: self.select(idx))
            items.append(urwid.AttrMap(btn, 'sel', 'sel_f'))
            items.append(urwid.Text(('sel_dim', f'   {t.path}'), wrap='clip'))
        if not items:
            items.append(urwid.Text(('sel_dim',
                ' No targets configured. Add them to projects.json or start an editor.')))
        self.w_sel_walker[:] = items
        if self.cfg.targets:
            self.selected = max(0, min(self.selected, len(self.cfg.targets) - 1))
            self.w_sel_list.focus_position = self.selected * 2

    # Refresh
    def _refresh_view(self) -> None:
        eng  = self.engine
        name = eng.current_name
        left = f' {name} | H -> Help' if name else ' H -> Help '
        attr = 'hdr_build' if eng.current_kind == 'build' else 'hdr_project'
        self.w_title.set_text((attr, left))

        if eng.progress.active:
            self.w_right.set_text(cook_markup(eng.progress))
        elif eng.cursor.category_filter is not None:
            self.w_right.set_text(
                ('hdr_filter', f'Filter: {eng.cursor.category_filter} (clear: F)'))
        else:
            self.w_right.set_text('')
        self.w_footer.set_text(eng.status)
        self.body.refresh()

    def _refresh_select(self) -> None:
        self.w_sel_footer.set_text(self.engine.status)

    def _refresh(self) -> None:
        if self.mode == 'view':
            self._refresh_view()
        else:
            self._refresh_select()

    def _current_widget(self) -> urwid.Widget:
        base = self.view_frame if self.mode == 'view' else self.select_frame
        if self.show_help and self.mode == 'view':
            return make_help_overlay(base)
        return base

    def _show(self) -> None:
        self._refresh()
        if self._loop_ref is not None:
            self._loop_ref.widget = self._current_widget()

    @property
    def widget(self) -> urwid.Widget:
        return self._current_widget()

    # Actions
    def select(self, idx: int) -> None:
        targets = self.cfg.targets
        if not 0 <= idx < len(targets):
            return
        self.selected = idx
        if self.engine.select_target(targets[idx]):
            self.mode = 'view'
        self._show()

    def open_file(self, path) -> None:
        self.engine.tail_file(path)
        self.mode = 'view'
        self._show()

    def back_to_selection(self) -> None:
        self.engine.back_to_selection()
        self.mode      = 'select'
        self.show_help = False
        self._rebuild_selection()
        self._show()

    def toggle_help(self) -> None:
        self.show_help = not self.show_help
        self._show()

    # Loop wiring
    def attach(self, loop) -> None:
        self._loop_ref = loop
        if self.discover:
            self._discovery_fd = loop.watch_pipe(self._on_discovery_pipe)
        self._tick_alarm = loop.set_alarm_in(0, self._on_tick)

    def _on_tick(self, loop, _user_data) -> None:
        if self.engine.tick():
            self._refresh()
        if self.mode == 'select':
            self._maybe_refresh_discovered()
        self._tick_alarm = loop.set_alarm_in(TICK_INTERVAL, self._on_tick)

    def _maybe_refresh_discovered(self) -> None:
        if not self.discover or self._discovering or self._discovery_fd is None:
            return
        now = time.monotonic()
        if now - self._last_discovery < DISCOVERY_INTERVAL:
            return
        self._last_discovery = now
        self._discovering    = True
        write_fd = self._discovery_fd

        def _worker():
            try:
                found = discovery.discover_open_editors()
                self._discovery_q.put(('ok', found))
            except Exception as exc:
                logger.exception('editor discovery failed')
                self._discovery_q.put(('error', str(exc)))
            try:   os.write(write_fd, b'x')
            except OSError: pass

        threading.Thread(target=_worker, daemon=True, name='discovery').start()

    def _on_discovery_pipe(self, _data: bytes) -> None:
        try:
            kind, payload = self._discovery_q.get_nowait()
        except _queue.Empty:
            return
        self._discovering = False
        if kind == 'error':
            self.engine.status = f'Discovery failed: {payload}'
            self._refresh()
            return
        before = len(self.cfg.projects)
        if discovery.merge_discovered(self.cfg, payload) and self.mode == 'select':
            if before == 0:
                self.engine.status = 'Running editor detected automatically'
            self._rebuild_selection()
        self._refresh()

    # Input handler
    def handle_input(self, key) -> None:
        if isinstance(key, tuple):
            return   # mouse events not consumed by a widget

        if self.show_help:
            if key in ('h', 'H', 'esc'):
                self.toggle_help()
            elif key in ('q', 'Q'):
                raise urwid.ExitMainLoop()
            return

        if key in ('q', 'Q', 'esc'):
            raise urwid.ExitMainLoop()

        if self.mode == 'select':
            return

        eng = self.engine
        if key in ('h', 'H'):
            self.toggle_help()
            return
        if key in ('s', 'S'):
            self.back_to_selection()
            return
        if   key in ('c', 'C'):
            eng.clear()
        elif key in ('t', 'T'):
            eng.view.toggle_timestamp()
        elif key in ('f', 'F'):
            eng.set_filter(None)
        elif key == 'up':
            eng.scroll(1)
        elif key == 'down':
            eng.scroll(-1)
        elif key == 'page up':
            eng.scroll(10)
        elif key == 'page down':
            eng.scroll(-10)
        elif key == 'home':
            eng.view.scroll_to_top()
        elif key == 'end':
            eng.view.scroll_to_bottom()
        else:
            return
        self._refresh()


def run(app: TailApp) -> None:
    loop = urwid.MainLoop(
        app.widget,
        palette         = PALETTE,
        unhandled_input = app.handle_input,
        handle_mouse    = True,
    )
    app.attach(loop)
    try:
        loop.run()
    finally:
        app.engine.close()
