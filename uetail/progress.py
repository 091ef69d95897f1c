"""Cook progress state machine driven by raw log text."""

from .parser import parse_cook_progress

_COOK_COMPLETED = 'cook command completed'
_COOK_STARTED   = 'cook command started'


class ProgressState:
    def __init__(self):
        self.active    = False
        self.completed = 0
        self.remaining = 0
        self.total     = 0

    def ratio(self) -> float:
        if self.total <= 0:
            return 0.0
        return max(0.0, min(1.0, self.completed / self.total))

    def percent(self) -> int:
        return round(self.ratio() * 100)

    def __repr__(self):
        return (f'ProgressState(active={self.active}, completed={self.completed}, '
                f'remaining={self.remaining}, total={self.total})')


class ProgressTracker:
    # Fed every arriving line; unmatched lines leave the state untouched.

    def __init__(self):
        self.state = ProgressState()

    def reset(self) -> None:
        self.state = ProgressState()

    def update(self, raw_text: str) -> None:
        st    = self.state
        lower = raw_text.lower()
        if _COOK_COMPLETED in lower:
            # keep the last numbers, only hide the bar
            st.active = False
            return
        if _COOK_STARTED in lower:
            st.active    = True
            st.completed = 0
            st.remaining = 0
            st.total     = 0
            return
        parsed = parse_cook_progress(raw_text)
        if parsed is None:
            return
        # a progress line implies a running cook even without the start marker
        st.active = True
        st.completed, st.remaining, st.total = parsed
